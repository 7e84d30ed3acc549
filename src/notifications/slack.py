"""
Slack notification sender for collection runs.

Posts run summaries to a Slack channel via an incoming webhook.
"""

from datetime import datetime, timezone

import httpx

from src.utils import logger
from src.notifications.config import NotificationSettings, notification_settings


class SlackNotifier:
    """
    Sends collection run messages to Slack via incoming webhooks.

    Sending never raises: a failed webhook call is logged and reported as
    False so a collection run is never affected by alerting.
    """

    def __init__(
        self,
        webhook_url: str | None = None,
        config: NotificationSettings | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize Slack notifier.

        Args:
            webhook_url: Slack incoming webhook URL
            config: Notification settings (defaults to environment)
            transport: Optional httpx transport (used by tests)
        """
        self.config = config or notification_settings
        self.webhook_url = webhook_url or self.config.slack.webhook_url
        self.enabled = self.config.slack.enabled and bool(self.webhook_url)
        self.transport = transport

        if self.enabled:
            logger.info("Slack notifier initialized")
        elif not self.webhook_url:
            logger.debug("Slack webhook URL not configured, notifications disabled")
        else:
            logger.info("Slack notifier disabled")

    def _send(self, payload: dict) -> bool:
        """
        Send a message to Slack.

        Returns:
            True if successful, False otherwise
        """
        if not self.enabled:
            logger.debug("Slack disabled or not configured, skipping notification")
            return False

        try:
            with httpx.Client(timeout=self.config.slack.timeout_seconds, transport=self.transport) as client:
                response = client.post(self.webhook_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Failed to send Slack notification: {e}")
            return False

        if response.status_code != 200:
            logger.error(f"Slack webhook failed: {response.status_code} - {response.text}")
            return False

        logger.info("Slack notification sent")
        return True

    def _fields(self, departure_iata: str, month: str, totals: dict[str, int]) -> list[dict]:
        return [
            {"type": "mrkdwn", "text": f"*Environment:*\n{self.config.environment}"},
            {"type": "mrkdwn", "text": f"*Airport / Month:*\n{departure_iata} {month}"},
            {"type": "mrkdwn", "text": f"*Saved:*\n{totals['totalSaved']}"},
            {"type": "mrkdwn", "text": f"*Days / Calls:*\n{totals['totalDays']} / {totals['totalApiCalls']}"},
        ]

    def notify_failure(
        self,
        departure_iata: str,
        month: str,
        totals: dict[str, int],
        failed_dates: list[str],
        error_message: str | None = None,
        run_id: int | None = None,
        timestamp: datetime | None = None,
    ) -> bool:
        """
        Report a run with skipped days.

        Args:
            departure_iata: Airport collected
            month: Month collected, YYYY-MM
            totals: totalSaved / totalDays / totalApiCalls
            failed_dates: Dates that were skipped
            error_message: Summary of the errors
            run_id: Collection run ID (if tracked)
            timestamp: When the run finished
        """
        timestamp = timestamp or datetime.now(timezone.utc)
        skipped = ", ".join(failed_dates) or "none"

        payload = {
            "blocks": [
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": "🚨 Schedule collection incomplete", "emoji": True},
                },
                {"type": "section", "fields": self._fields(departure_iata, month, totals)},
                {
                    "type": "section",
                    "text": {
                        "type": "mrkdwn",
                        "text": f"*Skipped days:* {skipped}\n```{error_message or 'n/a'}```",
                    },
                },
                {
                    "type": "context",
                    "elements": [
                        {
                            "type": "mrkdwn",
                            "text": f"Run {run_id or 'N/A'} · {timestamp.strftime('%Y-%m-%d %H:%M:%S UTC')}",
                        }
                    ],
                },
            ]
        }

        return self._send(payload)

    def notify_success(
        self,
        departure_iata: str,
        month: str,
        totals: dict[str, int],
        duration_seconds: float | None = None,
    ) -> bool:
        """Report a fully successful run (only when enabled in settings)."""
        if not self.config.slack.notify_on_success:
            return False

        duration_str = f"{duration_seconds:.1f}s" if duration_seconds else "N/A"
        payload = {
            "blocks": [
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": "✅ Schedule collection complete", "emoji": True},
                },
                {"type": "section", "fields": self._fields(departure_iata, month, totals)},
                {"type": "context", "elements": [{"type": "mrkdwn", "text": f"Duration: {duration_str}"}]},
            ]
        }

        return self._send(payload)


def create_slack_notifier() -> SlackNotifier:
    """Create a new Slack notifier."""
    return SlackNotifier()


__all__ = ["SlackNotifier", "create_slack_notifier"]
