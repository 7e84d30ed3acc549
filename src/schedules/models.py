"""
Schedule record model.

A ScheduleRecord is one scheduled flight occurrence as collected from the
provider. Its identity is (departure, arrival, flight number, date); the
route key and the month partition are derived from it and never stored
independently.
"""

import calendar
import re
from dataclasses import dataclass, fields, replace
from datetime import date as date_type
from enum import Enum
from typing import Any

from src.utils.exceptions import ValidationError


IATA_PATTERN = re.compile(r"^[A-Z]{3}$")
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")
ROUTE_PATTERN = re.compile(r"^[A-Z]{3}-[A-Z]{3}$")


class TimeSlot(str, Enum):
    """Half-day collection window."""
    MORNING = "00-12"
    AFTERNOON = "12-00"

    @property
    def start_time(self) -> str:
        return "00:00" if self is TimeSlot.MORNING else "12:00"

    @property
    def end_time(self) -> str:
        return "12:00" if self is TimeSlot.MORNING else "23:59"


class FlightStatus(str, Enum):
    """Normalized flight status."""
    SCHEDULED = "Scheduled"
    DELAYED = "Delayed"
    CANCELLED = "Cancelled"
    DIVERTED = "Diverted"


def normalize_iata(value: Any, field_name: str = "iata") -> str:
    """Upper-case and validate a 3-letter airport code."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a 3-letter airport code")
    code = value.strip().upper()
    if not IATA_PATTERN.match(code):
        raise ValidationError(f"{field_name} must be a 3-letter airport code, got {value!r}")
    return code


def parse_time_slot(value: Any) -> TimeSlot:
    try:
        return TimeSlot(value)
    except ValueError:
        raise ValidationError(f"timeSlot must be 00-12 or 12-00, got {value!r}")


def parse_date(value: Any) -> date_type:
    """Parse a YYYY-MM-DD calendar date."""
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        raise ValidationError(f"date must be YYYY-MM-DD, got {value!r}")
    try:
        return date_type.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"date is not a valid calendar date: {value}")


def validate_year_month(year: Any, month: Any) -> tuple[int, int]:
    """Coerce year/month to integers and check 1 <= month <= 12."""
    try:
        year_num = int(year)
        month_num = int(month)
    except (TypeError, ValueError):
        raise ValidationError("Invalid year or month")
    if not 1 <= month_num <= 12 or not 1 <= year_num <= 9999:
        raise ValidationError("Invalid year or month")
    return year_num, month_num


def parse_month(value: Any) -> tuple[int, int]:
    """Parse a YYYY-MM month string into (year, month)."""
    if not isinstance(value, str) or not MONTH_PATTERN.match(value):
        raise ValidationError("month must be in YYYY-MM format")
    year, month = value.split("-")
    return validate_year_month(year, month)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def make_route(departure_iata: str, arrival_iata: str) -> str:
    """Route key for an ordered departure/arrival pair, e.g. ICN-CEB."""
    return f"{departure_iata}-{arrival_iata}"


def normalize_route(value: Any) -> str:
    if not isinstance(value, str) or not ROUTE_PATTERN.match(value.strip().upper()):
        raise ValidationError(f"route must look like ICN-CEB, got {value!r}")
    return value.strip().upper()


# snake_case attribute -> document field
_DOCUMENT_FIELDS = {
    "departure_iata": "departureIata",
    "arrival_iata": "arrivalIata",
    "date": "date",
    "time_slot": "timeSlot",
    "flight_number": "flightNumber",
    "carrier": "carrier",
    "carrier_code": "carrierCode",
    "scheduled_departure_time": "scheduledDepartureTime",
    "scheduled_arrival_time": "scheduledArrivalTime",
    "arrival_date": "arrivalDate",
    "departure_airport": "departureAirport",
    "arrival_airport": "arrivalAirport",
    "aircraft_type": "aircraftType",
    "status": "status",
    "call_sign": "callSign",
    "is_cargo": "isCargo",
    "codeshare_status": "codeshareStatus",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


@dataclass(frozen=True)
class ScheduleRecord:
    """
    One scheduled flight occurrence.

    Construction normalizes airport codes to upper case, drops whitespace
    from the flight number and raises
    ValidationError for malformed codes, dates, time slots or an empty
    flight number.
    """

    departure_iata: str
    arrival_iata: str
    date: str
    time_slot: TimeSlot
    flight_number: str
    carrier: str = "Unknown"
    carrier_code: str = ""
    scheduled_departure_time: str = ""
    scheduled_arrival_time: str = ""
    arrival_date: str | None = None
    departure_airport: str = ""
    arrival_airport: str = ""
    aircraft_type: str | None = None
    status: FlightStatus = FlightStatus.SCHEDULED
    call_sign: str | None = None
    is_cargo: bool = False
    codeshare_status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "departure_iata", normalize_iata(self.departure_iata, "departureIata"))
        object.__setattr__(self, "arrival_iata", normalize_iata(self.arrival_iata, "arrivalIata"))
        parse_date(self.date)

        object.__setattr__(self, "time_slot", parse_time_slot(self.time_slot))

        try:
            object.__setattr__(self, "status", FlightStatus(self.status))
        except ValueError:
            raise ValidationError(f"Unknown flight status: {self.status!r}")

        flight_number = "".join(self.flight_number.split()) if isinstance(self.flight_number, str) else ""
        if not flight_number:
            raise ValidationError("flightNumber is required")
        object.__setattr__(self, "flight_number", flight_number)

    @property
    def route(self) -> str:
        return make_route(self.departure_iata, self.arrival_iata)

    @property
    def identity(self) -> tuple[str, str, str, str]:
        return (self.departure_iata, self.arrival_iata, self.flight_number, self.date)

    @property
    def record_id(self) -> str:
        """Document id derived from the identity, e.g. ICN-CEB_KE631_2024-02-01."""
        return f"{self.route}_{self.flight_number}_{self.date}"

    @property
    def year(self) -> int:
        return int(self.date[:4])

    @property
    def month(self) -> int:
        return int(self.date[5:7])

    @property
    def month_key(self) -> str:
        return self.date[:7]

    def same_schedule(self, other: "ScheduleRecord") -> bool:
        """Compare everything except store-maintained timestamps."""
        return self.to_document(timestamps=False) == other.to_document(timestamps=False)

    def with_timestamps(self, created_at: str, updated_at: str) -> "ScheduleRecord":
        return replace(self, created_at=created_at, updated_at=updated_at)

    def to_document(self, timestamps: bool = True) -> dict[str, Any]:
        """Convert to a JSON-compatible document (camelCase keys)."""
        document: dict[str, Any] = {"id": self.record_id, "route": self.route}
        for attribute, key in _DOCUMENT_FIELDS.items():
            if not timestamps and attribute in ("created_at", "updated_at"):
                continue
            value = getattr(self, attribute)
            document[key] = value.value if isinstance(value, Enum) else value
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "ScheduleRecord":
        """Rebuild a record from its stored document."""
        known = {f.name for f in fields(cls)}
        kwargs = {
            attribute: document[key]
            for attribute, key in _DOCUMENT_FIELDS.items()
            if key in document and attribute in known
        }
        return cls(**kwargs)


def sort_by_departure(records: list[ScheduleRecord]) -> list[ScheduleRecord]:
    """Order records by scheduled departure time, then by id."""
    return sorted(records, key=lambda r: (r.scheduled_departure_time, r.record_id))


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
