"""Slack messaging service with Block Kit."""

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from typing import Dict, List
import logging

from ..core.exceptions import SlackDeliveryError
from .aggregator import ReportStats

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "📊 *Справка по командам:*\n\n"
    "`/aura-report today` - Отчет за сегодняшний день\n"
    "`/aura-report yesterday` - Отчет за вчерашний день\n"
    "`/aura-report week` - Отчет за последние 7 дней\n"
    "`/aura-report month` - Отчет за последние 30 дней\n"
    "`/aura-report quarter` - Отчет за последние 90 дней\n"
    "`/aura-report halfyear` - Отчет за последние 180 дней\n"
    "`/aura-report year` - Отчет за последние 365 дней\n\n"
    "Каждая команда генерирует:\n"
    "✅ CSV файл с данными\n"
    "✅ PDF файл с графиками\n\n"
    "📅 Автоматические отчеты отправляются ежедневно в {schedule_time} ({timezone})"
)


def escape_mrkdwn(text: str) -> str:
    """Escape the characters Slack treats as control sequences."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def build_help_text(schedule_time: str, timezone: str) -> str:
    return HELP_TEXT.format(schedule_time=schedule_time, timezone=timezone)


class SlackService:
    """Service for Slack messaging and report file delivery."""

    def __init__(self, bot_token: str = None, client: WebClient = None):
        self.client = client or WebClient(token=bot_token)

    def send_message(self, channel: str, text: str, blocks: List[Dict] = None) -> Dict:
        """Send a text (and optional Block Kit) message to a channel or user."""
        try:
            response = self.client.chat_postMessage(channel=channel, text=text, blocks=blocks)
            return response.data
        except SlackApiError as e:
            logger.error(f"Slack API error: {e}")
            raise SlackDeliveryError(str(e), channel=channel) from e

    def build_report_stats_message(self, stats: ReportStats, title: str) -> Dict:
        """Build Block Kit message summarising report statistics."""
        blocks = [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": f"📊 {title}"}
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*📈 Всего генераций:*\n{stats.total_records}"},
                    {"type": "mrkdwn", "text": f"*👥 Уникальных клиентов:*\n{stats.unique_clients}"}
                ]
            },
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        f"🔴 Низкая аура (&lt;60%): *{stats.low_aura}*\n"
                        f"🟡 Нормальная аура (60-80%): *{stats.normal_aura}*\n"
                        f"🟢 Высокая аура (&gt;80%): *{stats.high_aura}*"
                    )
                }
            }
        ]

        if stats.club_stats:
            lines = ["📍 *Статистика по комплексам:*"]
            for club in stats.club_stats:
                lines.append(
                    f"\n🏢 _{escape_mrkdwn(club.club_name)}_\n"
                    f"   Генераций: *{club.total_generations}* ({club.percentage:.1f}%)\n"
                    f"   Клиентов: *{club.unique_clients}*"
                )
            blocks += [
                {"type": "divider"},
                {"type": "section", "text": {"type": "mrkdwn", "text": "\n".join(lines)}}
            ]

        if stats.avg_generation_time > 0:
            blocks.append({
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": f"⏱ *Среднее время генерации:* {stats.avg_generation_time:.1f} сек"
                }
            })

        if stats.done_count or stats.process_count:
            blocks.append({
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": (
                        "📋 *Статусы генераций:*\n"
                        f"   ✅ Done: *{stats.done_count}* ({stats.done_percentage:.1f}%)\n"
                        f"   ⏳ Process: *{stats.process_count}* ({stats.process_percentage:.1f}%)"
                    )
                }
            })

        return {"blocks": blocks}

    def _resolve_channel(self, channel: str) -> str:
        """Open a DM when given a user ID; file uploads need a channel ID."""
        if channel.startswith(("U", "W")):
            response = self.client.conversations_open(users=channel)
            return response["channel"]["id"]
        return channel

    def upload_file(self, channel: str, path: str, title: str) -> None:
        try:
            self.client.files_upload_v2(channel=channel, file=path, title=title)
        except SlackApiError as e:
            logger.error(f"Slack file upload failed for {path}: {e}")
            raise SlackDeliveryError(str(e), channel=channel) from e

    def send_report(
        self,
        channel: str,
        stats: ReportStats,
        csv_path: str,
        pdf_path: str,
        title: str = "Статистика по отчету",
    ) -> None:
        """Post the statistics message followed by the CSV and PDF files."""
        message = self.build_report_stats_message(stats, title)
        try:
            target = self._resolve_channel(channel)
        except SlackApiError as e:
            raise SlackDeliveryError(str(e), channel=channel) from e

        self.send_message(target, text=title, blocks=message["blocks"])
        self.upload_file(target, csv_path, "📄 CSV данные")
        self.upload_file(target, pdf_path, "📊 PDF с графиками")
        logger.info(f"Report delivered to {channel}")
