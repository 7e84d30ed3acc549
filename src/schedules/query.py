"""
Read side for stored schedules.

Selects one of the three store queries from the filters supplied:
route + year + month, then date, then year + month.
"""

from typing import Any

from src.utils import logger
from src.utils.exceptions import ValidationError
from src.schedules.models import (
    ScheduleRecord,
    normalize_iata,
    normalize_route,
    parse_date,
    validate_year_month,
)
from src.storage import ScheduleStore, create_store


def _present(value: Any) -> bool:
    return value is not None and value != ""


class ScheduleQueryService:
    """Answers schedule queries from the ScheduleStore."""

    def __init__(self, store: ScheduleStore | None = None):
        self.store = store or create_store()

    def query(
        self,
        date: str | None = None,
        year: Any = None,
        month: Any = None,
        route: str | None = None,
        departure_iata: str | None = None,
    ) -> list[ScheduleRecord]:
        """
        Find schedules matching the given filters.

        Precedence:
            1. route + year + month -> the route's aggregate for that month
            2. date -> all records of that day (optionally one airport)
            3. year + month -> all records of that month (optionally one airport)

        Args:
            date: YYYY-MM-DD
            year: Year, integer or numeric string
            month: Month 1-12, integer or numeric string
            route: AAA-BBB route key
            departure_iata: Restrict date/month queries to one airport

        Returns:
            Records sorted by scheduled departure time

        Raises:
            ValidationError: Malformed filters, or neither date nor year/month given
        """
        has_month = _present(year) and _present(month)
        airport = normalize_iata(departure_iata, "departureIata") if _present(departure_iata) else None

        if _present(route) and has_month:
            route_key = normalize_route(route)
            year_num, month_num = validate_year_month(year, month)
            logger.debug(f"Querying route {route_key} for {year_num}-{month_num:02d}")
            return self.store.get_by_route_and_month(route_key, year_num, month_num)

        if _present(date):
            parse_date(date)
            logger.debug(f"Querying date {date} (airport={airport})")
            return self.store.get_by_date(date, airport)

        if has_month:
            year_num, month_num = validate_year_month(year, month)
            logger.debug(f"Querying month {year_num}-{month_num:02d} (airport={airport})")
            return self.store.get_by_month(year_num, month_num, airport)

        raise ValidationError("date or year/month required")


def create_query_service(store: ScheduleStore | None = None) -> ScheduleQueryService:
    """Create a query service over the default store."""
    return ScheduleQueryService(store=store)


__all__ = ["ScheduleQueryService", "create_query_service"]
