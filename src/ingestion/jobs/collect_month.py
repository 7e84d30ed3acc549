"""
Monthly collection job.

Walks every day of a month for one departure airport and collects both
half-day units per day:
1. Validate airport and month before any provider call
2. Create an in-progress collection run record
3. For each day call the provider for 00-12, pause, then 12-00
4. Pause between days (shorter after a skipped day) to stay inside the
   provider's rate limit
5. Finish the run record with totals and notify on skipped days

A failing unit never aborts the run. Its day is reported as skipped and the
loop moves on.
"""

import time
from dataclasses import dataclass, field
from datetime import date as date_type
from enum import Enum
from typing import Callable, Protocol

from src.utils import logger
from src.utils.exceptions import (
    ProviderError,
    StoreError,
    DatabaseError,
    categorize_error,
)
from src.config import settings
from src.schedules.models import (
    TimeSlot,
    normalize_iata,
    parse_month,
    days_in_month,
    month_key,
)
from src.ingestion.components.client import create_client
from src.ingestion.db import (
    CollectionRunRepository,
    CollectionStatus,
    create_repository,
)
from src.notifications import CollectionNotifier, get_notifier


class UnitFetcher(Protocol):
    """Anything that can collect and persist one unit."""

    def fetch_and_store(self, departure_iata: str, date: str, time_slot: TimeSlot | str) -> int:
        ...


class UnitState(str, Enum):
    """Lifecycle of a single collection unit."""
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"


@dataclass
class CollectionUnit:
    """One (airport, date, half-day) provider call."""
    departure_iata: str
    date: str
    time_slot: TimeSlot
    state: UnitState = UnitState.PENDING
    saved: int = 0
    error: str | None = None


@dataclass
class CollectionSummary:
    """Totals of one monthly collection run."""
    departure_iata: str
    month: str
    total_saved: int = 0
    total_days: int = 0
    total_api_calls: int = 0
    failed_dates: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    run_id: int | None = None

    @property
    def status(self) -> CollectionStatus:
        if not self.failed_dates:
            return CollectionStatus.SUCCESS
        if self.total_days == 0:
            return CollectionStatus.FAILED
        return CollectionStatus.PARTIAL

    def totals(self) -> dict[str, int]:
        return {
            "totalSaved": self.total_saved,
            "totalDays": self.total_days,
            "totalApiCalls": self.total_api_calls,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "departureIata": self.departure_iata,
            "month": self.month,
            **self.totals(),
            "failedDates": list(self.failed_dates),
            "status": self.status.value,
            "runId": self.run_id,
        }


def plan_units(departure_iata: str, year: int, month: int) -> list[list[CollectionUnit]]:
    """Build the ordered units of a month, grouped by day."""
    return [
        [
            CollectionUnit(
                departure_iata=departure_iata,
                date=date_type(year, month, day).isoformat(),
                time_slot=slot,
            )
            for slot in (TimeSlot.MORNING, TimeSlot.AFTERNOON)
        ]
        for day in range(1, days_in_month(year, month) + 1)
    ]


class MonthlyCollector:
    """
    Collects a whole month of schedules for one departure airport.

    Units run strictly one after another. The pauses are part of the
    provider contract; `sleep` is injectable so tests can skip them.
    """

    def __init__(
        self,
        client: UnitFetcher | None = None,
        repository: CollectionRunRepository | None = None,
        notifier: CollectionNotifier | None = None,
        sleep: Callable[[float], None] = time.sleep,
        intra_day_delay: float | None = None,
        inter_day_delay: float | None = None,
    ):
        """
        Initialize the collector.

        Args:
            client: Collects and saves one unit (defaults to the AeroDataBox client)
            repository: Collection run tracking
            notifier: Slack notifier for skipped days
            sleep: Pause function
            intra_day_delay: Seconds between the two units of a day
            inter_day_delay: Seconds between days
        """
        self.client = client or create_client()
        self.repository = repository or create_repository()
        self.notifier = notifier or get_notifier()
        self.sleep = sleep
        self.intra_day_delay = (
            settings.collection.intra_day_delay_seconds if intra_day_delay is None else intra_day_delay
        )
        self.inter_day_delay = (
            settings.collection.inter_day_delay_seconds if inter_day_delay is None else inter_day_delay
        )

        logger.info("MonthlyCollector initialized")

    def _process_unit(self, unit: CollectionUnit) -> bool:
        """
        Run one unit, absorbing provider and store failures.

        Returns:
            True if the unit succeeded
        """
        unit.state = UnitState.PROCESSING
        try:
            unit.saved = self.client.fetch_and_store(unit.departure_iata, unit.date, unit.time_slot)
        except (ProviderError, StoreError) as e:
            category, message = categorize_error(e)
            unit.state = UnitState.SKIPPED
            unit.error = f"{unit.date} {unit.time_slot.value}: [{category}] {message}"
            logger.error(f"Unit failed, skipping: {unit.error}")
            return False

        unit.state = UnitState.SUCCEEDED
        logger.debug(f"Unit {unit.date} {unit.time_slot.value} saved {unit.saved} records")
        return True

    def _start_run(self, departure_iata: str, month: str) -> int | None:
        try:
            return self.repository.create_run(departure_iata, month).id
        except DatabaseError as e:
            logger.error(f"Could not record collection run start: {e}")
            return None

    def _finish_run(self, summary: CollectionSummary, error_message: str | None = None) -> None:
        if summary.run_id is None:
            return
        try:
            self.repository.finish_run(
                run_id=summary.run_id,
                status=CollectionStatus.FAILED if error_message else summary.status,
                total_saved=summary.total_saved,
                total_days=summary.total_days,
                total_api_calls=summary.total_api_calls,
                error_message=error_message or ("\n".join(summary.errors) or None),
            )
        except DatabaseError as e:
            logger.error(f"Could not record collection run result: {e}")

    def _notify(self, summary: CollectionSummary, duration_seconds: float) -> None:
        try:
            self.notifier.on_complete(summary, duration_seconds=duration_seconds)
        except Exception as e:
            logger.error(f"Failed to send collection notification: {e}")

    def collect_month(self, departure_iata: str, month: str) -> CollectionSummary:
        """
        Collect every unit of a month.

        Args:
            departure_iata: Airport to collect, e.g. ICN
            month: Month to collect, YYYY-MM

        Returns:
            CollectionSummary with totals and skipped dates

        Raises:
            ValidationError: Malformed airport or month (no provider call is made)
        """
        departure_iata = normalize_iata(departure_iata, "departureIata")
        year, month_num = parse_month(month)
        month = month_key(year, month_num)

        if departure_iata not in settings.collection.departure_airport_codes:
            logger.warning(f"{departure_iata} is not a configured departure airport, collecting anyway")

        days = plan_units(departure_iata, year, month_num)
        summary = CollectionSummary(departure_iata=departure_iata, month=month)
        summary.run_id = self._start_run(departure_iata, month)
        started = time.monotonic()

        logger.info(f"Starting monthly collection for {departure_iata} {month} ({len(days)} days)")

        try:
            for index, units in enumerate(days):
                day_ok = True
                for slot_index, unit in enumerate(units):
                    if slot_index > 0:
                        self.sleep(self.intra_day_delay)

                    summary.total_api_calls += 1
                    if self._process_unit(unit):
                        summary.total_saved += unit.saved
                    else:
                        day_ok = False
                        summary.errors.append(unit.error)

                if day_ok:
                    summary.total_days += 1
                else:
                    summary.failed_dates.append(units[0].date)

                logger.info(
                    f"Day {units[0].date} {'done' if day_ok else 'skipped'} "
                    f"({summary.total_saved} records so far)"
                )

                if index < len(days) - 1:
                    # A skipped day only waits out the between-calls pause
                    self.sleep(self.inter_day_delay if day_ok else self.intra_day_delay)

        except Exception as e:
            logger.exception(f"Unexpected error during monthly collection: {e}")
            self._finish_run(summary, error_message=f"Unexpected error: {e}")
            raise

        self._finish_run(summary)
        self._notify(summary, time.monotonic() - started)

        logger.info(
            f"Monthly collection complete for {departure_iata} {month}: "
            f"{summary.total_saved} saved, {summary.total_days}/{len(days)} days, "
            f"{summary.total_api_calls} calls"
        )
        return summary


def create_collector(client: UnitFetcher | None = None) -> MonthlyCollector:
    """
    Create a collector with default settings.

    Raises:
        MissingConfigError: No provider API key is configured
        IngestionRecordError: The run database cannot be opened
    """
    return MonthlyCollector(client=client)


def run_collect_month(departure_iata: str, month: str) -> CollectionSummary:
    """
    Run a single monthly collection.

    Args:
        departure_iata: Airport to collect
        month: Month to collect, YYYY-MM

    Returns:
        CollectionSummary with the result
    """
    return create_collector().collect_month(departure_iata, month)


__all__ = [
    "UnitFetcher",
    "UnitState",
    "CollectionUnit",
    "CollectionSummary",
    "MonthlyCollector",
    "plan_units",
    "create_collector",
    "run_collect_month",
]
