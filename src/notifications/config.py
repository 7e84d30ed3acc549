"""
Notification settings, read from SLACK_* and NOTIFY_* environment variables.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SlackSettings(BaseSettings):
    """Incoming-webhook delivery of collection run summaries."""

    enabled: bool = Field(default=True)
    webhook_url: str | None = Field(default=None)
    # Runs without skipped days are not announced unless set
    notify_on_success: bool = Field(default=False)
    timeout_seconds: float = Field(default=10.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="SLACK_")


class NotificationSettings(BaseSettings):
    """Channels plus the environment label shown in every message."""

    slack: SlackSettings = Field(default_factory=SlackSettings)
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(env_prefix="NOTIFY_")


@lru_cache
def get_notification_settings() -> NotificationSettings:
    return NotificationSettings()


notification_settings = get_notification_settings()

__all__ = [
    "SlackSettings",
    "NotificationSettings",
    "get_notification_settings",
    "notification_settings",
]
