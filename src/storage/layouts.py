"""
Physical storage layouts for schedule records.

DateLayout
    One document per record in ``flight_schedules``, keyed
    ``{date}_{route}_{flight_number}``. Serves exact-date lookups with a key-prefix
    scan and whole-month lookups with a month-prefix scan.

RouteMonthLayout
    One aggregate document per route and month in ``route_schedules``,
    keyed ``{route}_{YYYY-MM}``, holding every record of that route in that
    month under ``flights``. A route-scoped monthly query is a single read.

Both layouts are written only through ScheduleStore.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable

from src.utils import logger
from src.schedules.models import ScheduleRecord, make_route, month_key
from src.storage.documents import Document, DocumentStore


class ScheduleLayout(ABC):
    """A storage layout that can upsert a record by identity."""

    name: str
    collection: str

    def __init__(self, documents: DocumentStore):
        self.documents = documents

    @abstractmethod
    def upsert(self, record: ScheduleRecord) -> ScheduleRecord:
        """Write the record, replacing any record with the same identity."""


def _merge_timestamps(existing: Document | None, record: ScheduleRecord, now: str) -> ScheduleRecord:
    # Unchanged schedules keep their stored timestamps so re-saving is a no-op
    if existing is None:
        return record.with_timestamps(created_at=now, updated_at=now)
    previous = ScheduleRecord.from_document(existing)
    if previous.same_schedule(record):
        return previous
    return record.with_timestamps(created_at=previous.created_at or now, updated_at=now)


class DateLayout(ScheduleLayout):
    """Date-keyed record documents."""

    name = "date"
    collection = "flight_schedules"

    @staticmethod
    def key_for(record: ScheduleRecord) -> str:
        return f"{record.date}_{record.route}_{record.flight_number}"

    def upsert(self, record: ScheduleRecord, now: str | None = None) -> ScheduleRecord:
        """
        Write the record and return it with its stored timestamps.

        The first write of an identity sets created_at; later writes with
        changed fields refresh updated_at only.
        """
        now = now or datetime.now(timezone.utc).isoformat()
        stored: dict[str, ScheduleRecord] = {}

        def mutate(existing: Document | None) -> Document:
            merged = _merge_timestamps(existing, record, now)
            stored["record"] = merged
            return merged.to_document()

        self.documents.update(self.collection, self.key_for(record), mutate)
        return stored["record"]

    def get(self, record: ScheduleRecord) -> ScheduleRecord | None:
        """The stored record with the same identity, if any."""
        document = self.documents.get(self.collection, self.key_for(record))
        return ScheduleRecord.from_document(document) if document else None

    def get_by_date(self, date: str, departure_iata: str | None = None) -> list[ScheduleRecord]:
        prefix = f"{date}_{departure_iata}-" if departure_iata else f"{date}_"
        return [ScheduleRecord.from_document(doc) for _, doc in self.documents.query_prefix(self.collection, prefix)]

    def get_by_month(self, year: int, month: int, departure_iata: str | None = None) -> list[ScheduleRecord]:
        rows = self.documents.query_prefix(self.collection, f"{month_key(year, month)}-")
        records = [ScheduleRecord.from_document(doc) for _, doc in rows]
        if departure_iata:
            records = [r for r in records if r.departure_iata == departure_iata]
        logger.debug(f"Month scan {month_key(year, month)} read {len(rows)} documents")
        return records


class RouteMonthLayout(ScheduleLayout):
    """Route+month aggregate documents."""

    name = "route_month"
    collection = "route_schedules"

    @staticmethod
    def key(route: str, year: int, month: int) -> str:
        return f"{route}_{month_key(year, month)}"

    def upsert(
        self,
        record: ScheduleRecord,
        latest: Callable[[], ScheduleRecord | None] | None = None,
    ) -> ScheduleRecord:
        """
        Place the record (already carrying its timestamps) in its partition.

        `latest` is called while the aggregate is locked and its result, when
        not None, is written instead of `record`.
        """
        placed = {"record": record}

        def mutate(existing: Document | None) -> Document:
            current = (latest() if latest else None) or record
            placed["record"] = current
            aggregate: dict[str, Any] = existing or {
                "route": record.route,
                "year": record.year,
                "month": record.month,
                "flights": {},
            }
            aggregate["flights"][current.record_id] = current.to_document()
            aggregate["count"] = len(aggregate["flights"])
            return aggregate

        self.documents.update(self.collection, self.key(record.route, record.year, record.month), mutate)
        return placed["record"]

    def get_by_route_and_month(self, route: str, year: int, month: int) -> list[ScheduleRecord]:
        aggregate = self.documents.get(self.collection, self.key(route, year, month))
        if not aggregate:
            return []
        return [ScheduleRecord.from_document(doc) for doc in aggregate.get("flights", {}).values()]

    def list_routes(self) -> list[dict[str, str]]:
        """Distinct routes present in any month partition."""
        routes = sorted({key.split("_", 1)[0] for key in self.documents.list_keys(self.collection)})
        result = []
        for route in routes:
            departure_iata, _, arrival_iata = route.partition("-")
            result.append({
                "route": make_route(departure_iata, arrival_iata),
                "departureIata": departure_iata,
                "arrivalIata": arrival_iata,
            })
        return result


__all__ = ["ScheduleLayout", "DateLayout", "RouteMonthLayout"]
