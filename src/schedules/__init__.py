"""Schedule record model and the read-side query service."""

from src.schedules.models import (
    TimeSlot,
    FlightStatus,
    ScheduleRecord,
    normalize_iata,
    normalize_route,
    parse_time_slot,
    parse_date,
    parse_month,
    validate_year_month,
    days_in_month,
    month_key,
    make_route,
    sort_by_departure,
)

__all__ = [
    "TimeSlot",
    "FlightStatus",
    "ScheduleRecord",
    "normalize_iata",
    "normalize_route",
    "parse_time_slot",
    "parse_date",
    "parse_month",
    "validate_year_month",
    "days_in_month",
    "month_key",
    "make_route",
    "sort_by_departure",
]
