"""
Collection run notifier.

Turns a finished run summary into Slack messages.
"""

from typing import TYPE_CHECKING

from src.utils import logger
from src.notifications.slack import SlackNotifier, create_slack_notifier

if TYPE_CHECKING:
    from src.ingestion.jobs.collect_month import CollectionSummary


class CollectionNotifier:
    """Sends Slack notifications for partial/failed runs (and optionally successes)."""

    def __init__(self, slack: SlackNotifier | None = None):
        self.slack = slack or create_slack_notifier()

    def on_complete(
        self,
        summary: "CollectionSummary",
        duration_seconds: float | None = None,
    ) -> None:
        """
        Notify about a finished run.

        Args:
            summary: Totals and skipped dates of the run
            duration_seconds: Wall time of the run
        """
        totals = summary.totals()
        if summary.failed_dates:
            logger.warning(
                f"Collection {summary.departure_iata} {summary.month} skipped "
                f"{len(summary.failed_dates)} day(s)"
            )
            self.slack.notify_failure(
                departure_iata=summary.departure_iata,
                month=summary.month,
                totals=totals,
                failed_dates=summary.failed_dates,
                error_message="\n".join(summary.errors[:10]) or None,
                run_id=summary.run_id,
            )
        else:
            self.slack.notify_success(
                departure_iata=summary.departure_iata,
                month=summary.month,
                totals=totals,
                duration_seconds=duration_seconds,
            )


def create_notifier() -> CollectionNotifier:
    """Create a new notifier."""
    return CollectionNotifier()


_notifier: CollectionNotifier | None = None


def get_notifier() -> CollectionNotifier:
    """Get the global notifier instance."""
    global _notifier
    if _notifier is None:
        _notifier = create_notifier()
    return _notifier


__all__ = [
    "CollectionNotifier",
    "create_notifier",
    "get_notifier",
]
