"""Celery tasks for report generation and delivery."""

from celery import shared_task
from datetime import datetime
from pathlib import Path
from typing import Optional
import logging
import pytz

from ..config import settings
from ..core.exceptions import AuroScopeException, InvalidPeriodError
from ..core.metrics import track_report_generation, track_scheduled_delivery
from ..core.redis_client import redis_client
from ..services.periods import Period
from ..services.report_service import ReportService
from ..services.schedule_service import DailySchedule, ScheduleStateStore
from ..services.slack_service import SlackService

logger = logging.getLogger(__name__)


def _ensure_reports_dir() -> str:
    Path(settings.reports_dir).mkdir(parents=True, exist_ok=True)
    return settings.reports_dir


@shared_task(name="app.tasks.report_tasks.generate_report_for_channel")
def generate_report_for_channel(period: str, channel_id: str) -> dict:
    """Generate a report on demand and deliver it to a Slack channel."""
    slack_service = SlackService(bot_token=settings.slack_bot_token)

    try:
        report_period = Period.from_command(period)
    except InvalidPeriodError as e:
        logger.warning(f"Rejected report request: {e.message}")
        slack_service.send_message(channel_id, e.message_ru)
        return {"status": "error", "message": e.message}

    logger.info(f"Generating {report_period.value} report for channel {channel_id}")

    try:
        report_service = ReportService.from_settings(settings)
        # One instant for both the data window and its label
        now = datetime.now(pytz.UTC)
        csv_path, pdf_path, stats = report_service.generate_report(
            report_period, _ensure_reports_dir(), now=now
        )
        track_report_generation(report_period.value, "command")

        label = report_service.get_date_range(report_period, now).label
        slack_service.send_report(channel_id, stats, csv_path, pdf_path, title=f"Отчет: {label}")
        slack_service.send_message(channel_id, "✨ Отчет успешно отправлен!")

        return {"status": "success", "csv_path": csv_path, "pdf_path": pdf_path}

    except AuroScopeException as e:
        logger.error(f"Failed to generate report: {e.message}", exc_info=True)
        try:
            slack_service.send_message(channel_id, f"❌ {e.message_ru}")
        except AuroScopeException as slack_error:
            logger.error(f"Failed to post error to Slack: {slack_error.message}")
        return {"status": "error", "message": e.message}


@shared_task(name="app.tasks.report_tasks.send_daily_reports")
def send_daily_reports(now: Optional[str] = None) -> dict:
    """Send yesterday's report to every recipient once a day at the configured time.

    Args:
        now: ISO timestamp overriding the current time (used for manual runs)
    """
    current = datetime.fromisoformat(now) if now else datetime.now(pytz.UTC)

    schedule = DailySchedule(settings.report_schedule_time, settings.timezone)
    store = ScheduleStateStore(redis_client)
    state = store.load()

    if not schedule.is_due(current, state):
        return {"status": "skipped"}

    logger.info("Scheduled time reached. Sending daily reports...")

    recipients = settings.report_channels
    if not recipients:
        logger.info("No recipients configured. Skipping scheduled reports.")
        return {"status": "skipped", "message": "no recipients"}

    try:
        report_service = ReportService.from_settings(settings)
        csv_path, pdf_path, stats = report_service.generate_report(
            Period.YESTERDAY, _ensure_reports_dir(), now=current
        )
    except AuroScopeException as e:
        logger.error(f"Failed to send daily reports: {e.message}", exc_info=True)
        return {"status": "error", "message": e.message}

    track_report_generation(Period.YESTERDAY.value, "schedule")
    store.save(schedule.mark_sent(current))

    slack_service = SlackService(bot_token=settings.slack_bot_token)
    sent = 0
    for recipient in recipients:
        try:
            slack_service.send_report(
                recipient, stats, csv_path, pdf_path, title="Ежедневный отчет"
            )
            sent += 1
            track_scheduled_delivery("sent")
        except AuroScopeException as e:
            track_scheduled_delivery("failed")
            logger.error(f"Failed to send report to {recipient}: {e.message}")

    logger.info(f"Daily reports sent to {sent}/{len(recipients)} recipients")
    return {"status": "success", "sent": sent, "recipients": len(recipients)}
