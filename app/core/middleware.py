"""Request logging middleware with correlation IDs."""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Health checks and scrapers hit these every few seconds
QUIET_PATHS = {"/health", "/health/ready", "/metrics"}

request_id_context: ContextVar[Optional[str]] = ContextVar("request_id_context", default=None)


def get_current_request_id() -> Optional[str]:
    """Correlation ID of the request being served, if any."""
    return request_id_context.get()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status, duration and correlation ID.

    The ID is taken from the incoming ``X-Correlation-ID`` header when present
    and echoed back on the response.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        token = request_id_context.set(correlation_id)
        log = logger.debug if request.url.path in QUIET_PATHS else logger.info
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} crashed after "
                f"{(time.perf_counter() - started) * 1000:.1f}ms [{correlation_id}]: {e}",
                exc_info=True
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "internal_server_error",
                    "message": "Внутренняя ошибка сервера. Попробуйте позже.",
                    "correlation_id": correlation_id
                },
                headers={CORRELATION_HEADER: correlation_id}
            )
        finally:
            request_id_context.reset(token)

        log(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {(time.perf_counter() - started) * 1000:.1f}ms [{correlation_id}]"
        )

        # Exception handlers set their own ID
        response.headers.setdefault(CORRELATION_HEADER, correlation_id)
        return response
