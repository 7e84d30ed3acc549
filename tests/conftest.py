"""
Shared fixtures: SQLite files under tmp_path, sample records and a stub
unit fetcher. Nothing here touches the network.
"""

import pytest

from src.schedules.models import ScheduleRecord, TimeSlot
from src.storage import DocumentStore, ScheduleStore
from src.ingestion.db import CollectionRunRepository
from src.utils.exceptions import ProviderResponseError


@pytest.fixture
def document_store(tmp_path) -> DocumentStore:
    return DocumentStore(db_path=tmp_path / "schedules.db", busy_timeout=30)


@pytest.fixture
def store(document_store) -> ScheduleStore:
    return ScheduleStore(documents=document_store)


@pytest.fixture
def run_repository(tmp_path) -> CollectionRunRepository:
    return CollectionRunRepository(db_path=tmp_path / "collection_runs.db")


def build_record(**overrides) -> ScheduleRecord:
    """ICN -> CEB KE631 on 2024-02-01 unless overridden."""
    values = {
        "departure_iata": "ICN",
        "arrival_iata": "CEB",
        "date": "2024-02-01",
        "time_slot": TimeSlot.AFTERNOON,
        "flight_number": "KE631",
        "carrier": "Korean Air",
        "carrier_code": "KE",
        "scheduled_departure_time": "2024-02-01T19:30:00",
        "scheduled_arrival_time": "2024-02-01T23:10:00",
        "arrival_date": "2024-02-01",
        "departure_airport": "Seoul Incheon",
        "arrival_airport": "Mactan-Cebu",
        "aircraft_type": "Airbus A330",
    }
    values.update(overrides)
    return ScheduleRecord(**values)


@pytest.fixture
def make_record():
    return build_record


class StubFetcher:
    """
    Stands in for the schedule client.

    Returns `per_call` saved records per unit and raises a provider error
    for every unit dated on or after `fail_from` (or listed in `fail_units`).
    """

    def __init__(self, per_call: int = 3, fail_from: str | None = None, fail_units=(), error=None):
        self.per_call = per_call
        self.fail_from = fail_from
        self.fail_units = set(fail_units)
        self.error = error
        self.calls: list[tuple[str, str, TimeSlot]] = []

    def fetch_and_store(self, departure_iata, date, time_slot):
        self.calls.append((departure_iata, date, time_slot))
        failing = (self.fail_from is not None and date >= self.fail_from) or (date, time_slot) in self.fail_units
        if failing:
            raise self.error or ProviderResponseError("API request failed: 500", status_code=500)
        return self.per_call


@pytest.fixture
def stub_fetcher():
    return StubFetcher


@pytest.fixture
def sample_payload() -> dict:
    """Trimmed AeroDataBox answer for ICN, 2024-02-01 12:00-23:59."""
    return {
        "departures": [
            {
                "number": "KE 631",
                "status": "Expected",
                "callSign": "KAL631",
                "isCargo": False,
                "codeshareStatus": "IsOperator",
                "airline": {"name": "Korean Air", "iata": "KE"},
                "aircraft": {"model": "Airbus A330"},
                "departure": {
                    "airport": {"iata": "ICN", "name": "Seoul Incheon"},
                    "scheduledTime": {"local": "2024-02-01 19:30+09:00"},
                },
                "arrival": {
                    "airport": {"iata": "CEB", "name": "Mactan-Cebu"},
                    "scheduledTime": {"local": "2024-02-01 23:10+08:00"},
                },
            },
            {
                "number": "KE 703",
                "status": "Expected",
                "airline": {"name": "Korean Air"},
                "departure": {"scheduledTime": {"local": "2024-02-01 13:00+09:00"}},
                "arrival": {"airport": {"iata": "NRT", "name": "Tokyo Narita"}},
            },
        ],
        "arrivals": [
            {
                "number": "5J 188",
                "status": "Delayed",
                "airline": {"name": "Cebu Pacific"},
                "departure": {
                    "airport": {"iata": "MNL", "name": "Manila Ninoy Aquino"},
                    "scheduledTime": {"local": "2024-02-01 09:10+08:00"},
                },
                "arrival": {
                    "airport": {"iata": "ICN"},
                    "scheduledTime": {"local": "2024-02-01 14:25+09:00"},
                },
            },
        ],
    }
