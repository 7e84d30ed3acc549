"""
AeroDataBox client for airport flight schedules.

Fetches one collection unit (departure airport, date, half-day window) from
the AeroDataBox airport-schedule endpoint on RapidAPI, maps the response to
ScheduleRecords and saves them through the ScheduleStore.
Documentation: https://doc.aerodatabox.com/
"""

from typing import Any, Iterable

import httpx

from src.utils import logger
from src.utils.exceptions import (
    ProviderResponseError,
    RateLimitError,
    APIConnectionError,
    APITimeoutError,
    MalformedPayloadError,
    MissingConfigError,
)
from src.config import settings
from src.schedules.models import TimeSlot, normalize_iata, parse_date, parse_time_slot
from src.storage import ScheduleStore, create_store
from src.ingestion.components.mapper import map_payload


SCHEDULE_QUERY_FLAGS = {
    "withLeg": "true",
    "direction": "Both",
    "withCancelled": "true",
    "withCodeshared": "true",
    "withCargo": "true",
    "withPrivate": "true",
    "withLocation": "false",
}


class ScheduleClient:
    """
    Client for the AeroDataBox airport schedule API.

    One call covers one half-day window at one airport. The client never
    retries; pacing and retry policy belong to the caller.
    """

    def __init__(
        self,
        store: ScheduleStore | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
        host: str | None = None,
        timeout: int | None = None,
        tracked_airports: Iterable[str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the schedule client.

        Args:
            store: Schedule store records are written to
            base_url: API base URL (defaults to settings)
            api_key: RapidAPI key
            host: RapidAPI host header
            timeout: Request timeout in seconds
            tracked_airports: Far-end airports to keep (defaults to settings)
            transport: Optional httpx transport (used by tests)
        """
        self.store = store or create_store()
        self.base_url = (base_url or settings.provider.base_url).rstrip("/")
        self.api_key = api_key or settings.provider.api_key
        self.host = host or settings.provider.host
        self.timeout = timeout or settings.provider.timeout_seconds
        self.tracked_airports = frozenset(
            tracked_airports if tracked_airports is not None else settings.collection.tracked_airport_codes
        )
        self.transport = transport

        if not self.api_key:
            logger.warning("Schedule client initialized without an API key, requests will be rejected")

    def _make_request(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make a request to the provider.

        Args:
            endpoint: API endpoint path
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            ProviderResponseError: On non-2xx responses
            RateLimitError: When the provider throttles us
            APIConnectionError: On connection failures
            APITimeoutError: On request timeout
            MalformedPayloadError: When the body is not JSON
        """
        url = f"{self.base_url}{endpoint}"
        headers = {
            "x-rapidapi-host": self.host,
            "x-rapidapi-key": self.api_key or "",
        }

        try:
            logger.debug(f"Making request to {url} with params: {params}")

            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.get(url, params=params, headers=headers)

        except httpx.TimeoutException as e:
            raise APITimeoutError(f"Request to provider timed out: {e}", timeout=self.timeout)
        except httpx.TransportError as e:
            raise APIConnectionError(f"Failed to connect to provider: {e}")

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                message="Provider rate limit exceeded",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )

        if not response.is_success:
            raise ProviderResponseError(
                message=f"API request failed: {response.status_code}",
                status_code=response.status_code,
                response_body=response.text[:500],
            )

        # AeroDataBox answers 204 when the window has no flights
        if response.status_code == 204 or not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise MalformedPayloadError(f"Provider returned invalid JSON: {e}")

    def fetch_schedules(self, departure_iata: str, date: str, time_slot: TimeSlot | str) -> Any:
        """
        Fetch the raw schedule payload for one airport and half-day window.

        Returns:
            Provider payload with 'departures' and 'arrivals' lists
        """
        slot = parse_time_slot(time_slot)
        endpoint = (
            f"/flights/airports/iata/{departure_iata}/"
            f"{date}T{slot.start_time}/{date}T{slot.end_time}"
        )
        logger.info(f"Fetching schedules for {departure_iata} {date} {slot.value}")
        return self._make_request(endpoint, dict(SCHEDULE_QUERY_FLAGS))

    def fetch_and_store(self, departure_iata: str, date: str, time_slot: TimeSlot | str) -> int:
        """
        Collect one unit and persist its records in both layouts.

        Args:
            departure_iata: Airport to collect
            date: Local date, YYYY-MM-DD
            time_slot: "00-12" or "12-00"

        Returns:
            Number of records saved

        Raises:
            ValidationError: Malformed airport, date or time slot
            ProviderError: Network, HTTP or payload failure
            RateLimitError: Provider throttling
            StoreError: Persisting a record failed
        """
        departure_iata = normalize_iata(departure_iata, "departureIata")
        parse_date(date)
        slot = parse_time_slot(time_slot)

        payload = self.fetch_schedules(departure_iata, date, slot)
        records = map_payload(payload, departure_iata, date, slot, self.tracked_airports)

        saved = 0
        for record in records:
            self.store.save(record)
            saved += 1

        logger.info(f"Saved {saved} schedules for {departure_iata} {date} {slot.value}")
        return saved


def create_client(store: ScheduleStore | None = None) -> ScheduleClient:
    """
    Create a schedule client with default settings.

    Raises:
        MissingConfigError: No provider API key is configured
    """
    if not settings.provider.api_key:
        raise MissingConfigError("PROVIDER_API_KEY")
    return ScheduleClient(store=store)


__all__ = ["ScheduleClient", "create_client", "SCHEDULE_QUERY_FLAGS"]
