"""FastAPI application entry point."""

import logging
from pathlib import Path
from fastapi import FastAPI

from .config import settings
from .core.middleware import RequestLoggingMiddleware
from .core.exceptions import register_exception_handlers
from .tasks.celery_app import celery_app  # noqa: F401  binds shared tasks to the configured broker

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="AuroScope Report Bot",
    description="Slack bot delivering aura generation reports (CSV + PDF) from NocoDB",
    version="1.0.0",
    debug=settings.debug
)

# Register exception handlers
register_exception_handlers(app)

app.add_middleware(RequestLoggingMiddleware)


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Starting AuroScope Report Bot...")
    logger.info(f"Environment: {settings.environment}")

    Path(settings.reports_dir).mkdir(parents=True, exist_ok=True)
    logger.info(f"Reports directory ready: {settings.reports_dir}")

    logger.info(
        f"Daily reports at {settings.report_schedule_time} ({settings.report_timezone}) "
        f"to {len(settings.report_channels)} recipient(s)"
    )
    logger.info("✅ AuroScope Report Bot started successfully")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    from .core.redis_client import redis_client

    logger.info("Shutting down AuroScope Report Bot...")
    redis_client.close()
    logger.info("Redis client closed")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "AuroScope Report Bot",
        "version": "1.0.0",
        "docs": "/docs"
    }


# Register API routers
from .api.endpoints import slack  # noqa: E402
from .api.endpoints.health import router as health_router  # noqa: E402
from .api.endpoints.reports import router as reports_router  # noqa: E402
from .core.metrics import metrics_router  # noqa: E402

app.include_router(health_router, tags=["health"])
app.include_router(slack.router, prefix="/slack", tags=["slack"])
app.include_router(reports_router, prefix="/api/v1", tags=["reports"])
app.include_router(metrics_router, tags=["monitoring"])
