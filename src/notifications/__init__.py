"""
Notifications module for collection run alerts (Slack).

Usage:
    from src.notifications import get_notifier

    get_notifier().on_complete(summary, duration_seconds=42.0)

Configuration (environment variables):
    SLACK_ENABLED: Enable Slack notifications (default: true)
    SLACK_WEBHOOK_URL: Incoming webhook URL (required for notifications)
    SLACK_NOTIFY_ON_SUCCESS: Also post fully successful runs (default: false)
"""

from src.notifications.config import (
    SlackSettings,
    NotificationSettings,
    notification_settings,
    get_notification_settings,
)
from src.notifications.slack import SlackNotifier, create_slack_notifier
from src.notifications.notifier import (
    CollectionNotifier,
    create_notifier,
    get_notifier,
)

__all__ = [
    # Config
    "SlackSettings",
    "NotificationSettings",
    "notification_settings",
    "get_notification_settings",
    # Slack
    "SlackNotifier",
    "create_slack_notifier",
    # Main notifier
    "CollectionNotifier",
    "create_notifier",
    "get_notifier",
]
