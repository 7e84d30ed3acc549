"""
Schedule store: one logical entity, two physical layouts.

The store is the only writer of both layouts. ``save`` upserts the
date-keyed document first and then the route+month aggregate; if the second
write fails the caller gets a PartialWriteError instead of a silently
diverged layout.
"""

from datetime import datetime, timezone

from src.utils import logger
from src.utils.exceptions import PartialWriteError, StoreError
from src.schedules.models import ScheduleRecord, sort_by_departure
from src.storage.documents import DocumentStore, create_document_store
from src.storage.layouts import DateLayout, RouteMonthLayout


class ScheduleStore:
    """Persists schedule records and serves point and range queries."""

    def __init__(self, documents: DocumentStore | None = None):
        """
        Initialize the store.

        Args:
            documents: Backing document store (created from settings if not provided)
        """
        self.documents = documents or create_document_store()
        self.date_layout = DateLayout(self.documents)
        self.route_layout = RouteMonthLayout(self.documents)

    def save(self, record: ScheduleRecord) -> ScheduleRecord:
        """
        Upsert a record into both layouts by identity.

        Returns:
            The record as stored, with timestamps

        Raises:
            StoreError: The date-layout write failed (nothing written)
            PartialWriteError: The aggregate write failed after the date write
        """
        now = datetime.now(timezone.utc).isoformat()
        stored = self.date_layout.upsert(record, now=now)

        try:
            # Re-read under the aggregate lock so a racing save of the same identity
            # cannot leave the two layouts holding different versions
            self.route_layout.upsert(stored, latest=lambda: self.date_layout.get(stored))
        except StoreError as e:
            logger.error(f"Aggregate write failed for {stored.record_id}: {e}")
            raise PartialWriteError(
                message=str(e),
                layout=self.route_layout.name,
                record_id=stored.record_id,
            )

        logger.debug(f"Saved {stored.record_id}")
        return stored

    def get_by_date(self, date: str, departure_iata: str | None = None) -> list[ScheduleRecord]:
        """All records departing on date, optionally from one airport."""
        return sort_by_departure(self.date_layout.get_by_date(date, departure_iata))

    def get_by_month(self, year: int, month: int, departure_iata: str | None = None) -> list[ScheduleRecord]:
        """All records of a month via a full date-layout scan."""
        return sort_by_departure(self.date_layout.get_by_month(year, month, departure_iata))

    def get_by_route_and_month(self, route: str, year: int, month: int) -> list[ScheduleRecord]:
        """All records of a route in a month from its aggregate document."""
        return sort_by_departure(self.route_layout.get_by_route_and_month(route, year, month))

    def list_routes(self) -> list[dict[str, str]]:
        """Routes with at least one stored month, sorted by departure then arrival."""
        return self.route_layout.list_routes()


def create_store() -> ScheduleStore:
    """Create a new schedule store with default settings."""
    return ScheduleStore()


__all__ = ["ScheduleStore", "create_store"]
