"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from ..config import settings

# Create Celery application
celery_app = Celery(
    "auroscope_report_bot",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.report_tasks"],
)

# Configure Celery
celery_app.conf.update(
    timezone=settings.report_timezone,
    enable_utc=True,
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    task_track_started=True,
    task_time_limit=900,
    task_soft_time_limit=840,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
)

# Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    "send-daily-reports": {
        "task": "app.tasks.report_tasks.send_daily_reports",
        "schedule": crontab(minute="*"),  # Every minute; the task checks the configured time
    },
}
