"""Slack slash command handler."""

from fastapi import APIRouter, Request, HTTPException
from urllib.parse import parse_qs
import logging

from ...config import settings
from ...core.exceptions import AccessDeniedError, InvalidPeriodError
from ...core.security import verify_slack_signature
from ...schemas.slack import SlackCommand
from ...services.periods import Period, resolve
from ...services.slack_service import build_help_text
from ...tasks.report_tasks import generate_report_for_channel

logger = logging.getLogger(__name__)
router = APIRouter()

HELP_KEYWORDS = {"", "help", "start"}


def check_access(user_id: str) -> None:
    """Raise AccessDeniedError unless the user is allowed (empty list allows everyone)."""
    allowed = settings.allowed_users
    if allowed and user_id not in allowed:
        raise AccessDeniedError(user_id)


def _ephemeral(text: str) -> dict:
    return {"response_type": "ephemeral", "text": text}


@router.post("/commands")
async def slack_commands(request: Request):
    """Handle the report slash command."""
    # Read raw body first for signature verification
    body = await request.body()
    body_str = body.decode("utf-8")

    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")
    signature = request.headers.get("X-Slack-Signature", "")

    if not verify_slack_signature(body_str, timestamp, signature, settings.slack_signing_secret):
        raise HTTPException(status_code=403, detail="Invalid signature")

    command = SlackCommand.from_form(parse_qs(body_str))
    text = command.text.strip().lower()

    logger.info(
        f"Received command: {command.command} {text!r} from user {command.user_id} "
        f"in channel {command.channel_id}"
    )

    try:
        check_access(command.user_id)
    except AccessDeniedError as e:
        logger.warning(e.message)
        return _ephemeral(e.message_ru)

    if text in HELP_KEYWORDS:
        return _ephemeral(build_help_text(settings.report_schedule_time, settings.report_timezone))

    try:
        period = Period.from_command(text)
    except InvalidPeriodError as e:
        logger.info(e.message)
        return _ephemeral(build_help_text(settings.report_schedule_time, settings.report_timezone))

    label = resolve(period, tz=settings.timezone).label
    generate_report_for_channel.delay(period.value, command.channel_id)

    return {
        "response_type": "in_channel",
        "text": f"🔄 Генерирую отчет: {label}"
    }
