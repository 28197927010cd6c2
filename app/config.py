"""Configuration management using Pydantic Settings."""

from typing import List, Optional
from pydantic import Field, field_validator, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict
import pytz


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # FastAPI
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    debug: bool = Field(default=False)
    environment: str = Field(default="production")

    # NocoDB
    nocodb_url: str = Field(...)
    nocodb_token: str = Field(...)
    nocodb_table_id: str = Field(...)
    nocodb_clubs_table_id: str = Field(...)
    nocodb_created_field: str = Field(
        default="CreatedAt1",
        validation_alias=AliasChoices("nocodb_created_field", "nocodb_time_field")
    )
    nocodb_updated_field: str = Field(default="UpdatedAt1")
    nocodb_page_size: int = Field(default=100)
    nocodb_timeout: int = Field(default=60)

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Celery (defaults to Redis URL if not set)
    celery_broker_url: Optional[str] = Field(default=None)
    celery_result_backend: Optional[str] = Field(default=None)

    # Slack
    slack_bot_token: str = Field(...)
    slack_signing_secret: str = Field(...)

    # Access control and delivery (comma-separated lists)
    allowed_user_ids: str = Field(default="")
    scheduled_report_channels: str = Field(default="")

    # Reports
    report_schedule_time: str = Field(default="09:00")
    report_timezone: str = Field(default="Europe/Moscow")
    reports_dir: str = Field(default="reports")

    # Monitoring
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v_upper

    @field_validator("report_schedule_time")
    @classmethod
    def validate_schedule_time(cls, v: str) -> str:
        v = v.strip()
        try:
            hour, minute = map(int, v.split(":"))
        except ValueError:
            raise ValueError(f"Invalid schedule time (expected HH:MM): {v}")
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError(f"Invalid schedule time (expected HH:MM): {v}")
        return f"{hour:02d}:{minute:02d}"

    @field_validator("report_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("nocodb_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def __init__(self, **data):
        super().__init__(**data)
        # Set Celery URLs to Redis URL if not explicitly provided
        if not self.celery_broker_url:
            self.celery_broker_url = self.redis_url
        if not self.celery_result_backend:
            self.celery_result_backend = self.redis_url

    @property
    def allowed_users(self) -> List[str]:
        """Slack user IDs allowed to request reports (empty = everyone)."""
        return _split_csv(self.allowed_user_ids)

    @property
    def report_channels(self) -> List[str]:
        """Recipients of the daily report; falls back to allowed users' DMs."""
        return _split_csv(self.scheduled_report_channels) or self.allowed_users

    @property
    def timezone(self):
        """Civil timezone used for period boundaries and display."""
        return pytz.timezone(self.report_timezone)

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


def _split_csv(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


# Global settings instance
settings = Settings()
