"""
Maps AeroDataBox airport-schedule payloads to ScheduleRecords.

The payload is treated as untyped JSON and validated here, so provider
schema drift stays local to this module.

Payload shape (relevant parts):
    {
      "departures": [ {number, status, airline{name}, aircraft{model},
                       departure{airport{iata,name}, scheduledTime{local}},
                       arrival{...}, callSign, isCargo, codeshareStatus}, ...],
      "arrivals":   [ ... same entry shape ... ]
    }
"""

import re
from typing import Any, Iterable

from src.utils import logger
from src.utils.exceptions import MalformedPayloadError, ValidationError
from src.schedules.models import FlightStatus, ScheduleRecord, TimeSlot


_LOCAL_TIME = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[ T](\d{2}):(\d{2})(?::(\d{2}))?(?:\.\d+)?\s*(?:Z|[+-]\d{2}:?\d{2})?$"
)


def parse_local_time(value: Any) -> str | None:
    """
    Normalize a provider local time to YYYY-MM-DDTHH:MM:SS.

    The UTC offset is dropped: "2025-08-01 06:55+09:00" -> "2025-08-01T06:55:00".
    """
    if not isinstance(value, str):
        return None
    match = _LOCAL_TIME.match(value.strip())
    if not match:
        return None
    day, hour, minute, second = match.groups()
    return f"{day}T{hour}:{minute}:{second or '00'}"


def map_status(status: Any) -> FlightStatus:
    status_lower = str(status or "").lower()
    if "cancel" in status_lower:
        return FlightStatus.CANCELLED
    if "delayed" in status_lower:
        return FlightStatus.DELAYED
    if "diverted" in status_lower:
        return FlightStatus.DIVERTED
    return FlightStatus.SCHEDULED


def split_flight_number(number: Any) -> tuple[str, str]:
    """
    Split "KE 631" into ("KE", "KE631").

    Returns:
        Tuple of (carrier_code, flight_number)
    """
    if not isinstance(number, str) or not number.strip():
        raise ValidationError("Flight entry has no number")
    parts = number.split()
    carrier_code = parts[0] if len(parts) > 1 else ""
    return carrier_code, "".join(parts)


def _airport(leg: Any) -> dict[str, Any]:
    if isinstance(leg, dict) and isinstance(leg.get("airport"), dict):
        return leg["airport"]
    return {}


def _scheduled_local(leg: Any) -> str | None:
    if isinstance(leg, dict) and isinstance(leg.get("scheduledTime"), dict):
        return parse_local_time(leg["scheduledTime"].get("local"))
    return None


def map_entry(
    entry: dict[str, Any],
    direction: str,
    requested_iata: str,
    requested_date: str,
    time_slot: TimeSlot,
) -> ScheduleRecord:
    """
    Map one departures/arrivals entry.

    Outbound entries (direction "departure") leave the requested airport;
    inbound entries (direction "arrival") land at it.
    """
    departure_leg = entry.get("departure")
    arrival_leg = entry.get("arrival")

    if direction == "departure":
        departure_iata = requested_iata
        departure_airport = _airport(departure_leg).get("name") or ""
        arrival_iata = _airport(arrival_leg).get("iata")
        arrival_airport = _airport(arrival_leg).get("name") or ""
    else:
        departure_iata = _airport(departure_leg).get("iata")
        departure_airport = _airport(departure_leg).get("name") or ""
        arrival_iata = requested_iata
        arrival_airport = _airport(arrival_leg).get("name") or ""

    carrier_code, flight_number = split_flight_number(entry.get("number"))
    scheduled_departure = _scheduled_local(departure_leg)
    scheduled_arrival = _scheduled_local(arrival_leg)

    airline = entry.get("airline") if isinstance(entry.get("airline"), dict) else {}
    aircraft = entry.get("aircraft") if isinstance(entry.get("aircraft"), dict) else {}

    return ScheduleRecord(
        departure_iata=departure_iata,
        arrival_iata=arrival_iata,
        # Records are filed under the local departure date, not the arrival date
        date=scheduled_departure[:10] if scheduled_departure else requested_date,
        time_slot=time_slot,
        flight_number=flight_number,
        carrier=airline.get("name") or "Unknown",
        carrier_code=carrier_code or airline.get("iata") or "",
        scheduled_departure_time=scheduled_departure or "",
        scheduled_arrival_time=scheduled_arrival or "",
        arrival_date=scheduled_arrival[:10] if scheduled_arrival else None,
        departure_airport=departure_airport,
        arrival_airport=arrival_airport,
        aircraft_type=aircraft.get("model"),
        status=map_status(entry.get("status")),
        call_sign=entry.get("callSign"),
        is_cargo=bool(entry.get("isCargo", False)),
        codeshare_status=entry.get("codeshareStatus"),
    )


def _far_end(entry: dict[str, Any], direction: str) -> str | None:
    leg = entry.get("arrival") if direction == "departure" else entry.get("departure")
    code = _airport(leg).get("iata")
    return code.upper() if isinstance(code, str) else None


def map_payload(
    payload: Any,
    requested_iata: str,
    requested_date: str,
    time_slot: TimeSlot,
    tracked_airports: Iterable[str] | None = None,
) -> list[ScheduleRecord]:
    """
    Map a full provider payload to records.

    Entries whose far end is not a tracked airport are dropped. Entries that
    cannot be mapped are logged and skipped.

    Raises:
        MalformedPayloadError: Payload is not an object or its lists are not lists
    """
    if not isinstance(payload, dict):
        raise MalformedPayloadError(f"Expected a JSON object, got {type(payload).__name__}")

    tracked = {code.upper() for code in tracked_airports} if tracked_airports is not None else None
    records: list[ScheduleRecord] = []

    for direction, field in (("departure", "departures"), ("arrival", "arrivals")):
        entries = payload.get(field) or []
        if not isinstance(entries, list):
            raise MalformedPayloadError(f"'{field}' must be a list")

        kept = [
            entry for entry in entries
            if isinstance(entry, dict) and (tracked is None or _far_end(entry, direction) in tracked)
        ]
        logger.debug(f"{field}: kept {len(kept)} of {len(entries)} entries")

        for entry in kept:
            try:
                records.append(map_entry(entry, direction, requested_iata, requested_date, time_slot))
            except ValidationError as e:
                logger.warning(f"Skipping {direction} entry {entry.get('number')}: {e.message}")

    return records


__all__ = [
    "parse_local_time",
    "map_status",
    "split_flight_number",
    "map_entry",
    "map_payload",
]
