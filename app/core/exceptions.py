"""
Custom exception handling for the AuroScope report bot.

This module defines custom exceptions and their handlers for the application.
Every exception carries a Russian user-facing message next to the English log
message, plus a correlation ID for tracing.
"""

import uuid
from typing import Optional, Dict, Any
from fastapi import Request, status
from fastapi.responses import JSONResponse
import logging

from .middleware import get_current_request_id

logger = logging.getLogger(__name__)


# ============================================================================
# Base Exception Classes
# ============================================================================

class AuroScopeException(Exception):
    """Base exception class for all report bot errors."""

    def __init__(
        self,
        message: str,
        message_ru: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.message_ru = message_ru
        self.status_code = status_code
        self.details = details or {}
        self.correlation_id = get_current_request_id() or str(uuid.uuid4())
        super().__init__(message)


# ============================================================================
# Data Store Exceptions
# ============================================================================

class NocoDBError(AuroScopeException):
    """Raised when the NocoDB data store rejects a request or is unreachable."""

    def __init__(
        self,
        error_message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"NocoDB error: {error_message}",
            message_ru="База данных недоступна. Попробуйте позже.",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={**(details or {}), "upstream_status": status_code},
        )
        self.upstream_status = status_code


# ============================================================================
# Report Pipeline Exceptions
# ============================================================================

class ReportGenerationError(AuroScopeException):
    """Raised when a stage of the report pipeline fails.

    ``stage`` is one of ``lookup``, ``fetch``, ``csv`` or ``pdf``.
    """

    STAGE_MESSAGES_RU = {
        "lookup": "не удалось загрузить список комплексов",
        "fetch": "не удалось загрузить данные",
        "csv": "не удалось создать CSV файл",
        "pdf": "не удалось создать PDF файл",
    }

    def __init__(self, stage: str, error_message: str, details: Optional[Dict[str, Any]] = None):
        stage_ru = self.STAGE_MESSAGES_RU.get(stage, stage)
        super().__init__(
            message=f"Report generation failed at stage '{stage}': {error_message}",
            message_ru=f"Ошибка при генерации отчета: {stage_ru}.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details={**(details or {}), "stage": stage},
        )
        self.stage = stage


class InvalidPeriodError(AuroScopeException):
    """Raised when a report period keyword cannot be recognised."""

    def __init__(self, value: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Unknown report period: {value!r}",
            message_ru=f"Неизвестный период отчета: {value}",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={**(details or {}), "period": value},
        )
        self.value = value


# ============================================================================
# Slack Exceptions
# ============================================================================

class AccessDeniedError(AuroScopeException):
    """Raised when a Slack user is not in the allow list."""

    def __init__(self, user_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=f"Access denied for user {user_id}",
            message_ru="❌ У вас нет доступа к этому боту.",
            status_code=status.HTTP_403_FORBIDDEN,
            details={**(details or {}), "user_id": user_id},
        )
        self.user_id = user_id


class SlackDeliveryError(AuroScopeException):
    """Raised when Slack API refuses a message or file upload."""

    def __init__(
        self,
        error_message: str,
        channel: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"Slack API error: {error_message}",
            message_ru="Не удалось отправить отчет в Slack.",
            status_code=status.HTTP_502_BAD_GATEWAY,
            details={**(details or {}), "channel": channel},
        )
        self.channel = channel


# ============================================================================
# Exception Handlers
# ============================================================================

INTERNAL_ERROR_RU = "Внутренняя ошибка сервера. Попробуйте позже."


def _error_response(status_code: int, content: Dict[str, Any], correlation_id: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={**content, "correlation_id": correlation_id},
        headers={"X-Correlation-ID": correlation_id}
    )


async def auroscope_exception_handler(request: Request, exc: AuroScopeException) -> JSONResponse:
    """Log the error and answer with its Russian message."""
    logger.error(
        f"[{exc.correlation_id}] {request.method} {request.url.path} "
        f"{exc.__class__.__name__}: {exc.message} details={exc.details}"
    )

    content = {"error": exc.__class__.__name__, "message": exc.message_ru}
    if exc.details:
        content["details"] = exc.details
    return _error_response(exc.status_code, content, exc.correlation_id)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for anything that escaped the endpoints."""
    correlation_id = get_current_request_id() or str(uuid.uuid4())
    logger.exception(f"[{correlation_id}] Unhandled exception on {request.url.path}: {exc}")

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"error": "internal_server_error", "message": INTERNAL_ERROR_RU},
        correlation_id,
    )


def register_exception_handlers(app):
    """
    Register all exception handlers with the FastAPI application.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(AuroScopeException, auroscope_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
