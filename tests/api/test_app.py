"""
Tests for the HTTP API.

Collaborators are swapped through FastAPI dependency overrides: a SQLite
store under tmp_path, a stub schedule client and a static token verifier.
"""

from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from src.api.app import (
    create_app,
    get_client,
    get_collector,
    get_query_service,
    get_run_repository,
    get_store,
)
from src.api.auth import StaticTokenVerifier, get_verifier
from src.config import settings
from src.ingestion.jobs.collect_month import MonthlyCollector
from src.utils.exceptions import ProviderResponseError, RateLimitError, StoreError


AUTH = {"Authorization": "Bearer secret-token"}


@pytest.fixture
def unit_client():
    client = Mock()
    client.fetch_and_store.return_value = 4
    return client


@pytest.fixture
def app(store, run_repository, stub_fetcher, unit_client):
    app = create_app()
    app.dependency_overrides[get_verifier] = lambda: StaticTokenVerifier(["secret-token"])
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_run_repository] = lambda: run_repository
    app.dependency_overrides[get_client] = lambda: lambda: unit_client
    app.dependency_overrides[get_collector] = lambda: lambda: MonthlyCollector(
        client=stub_fetcher(per_call=3, fail_from="2024-02-28"),
        repository=run_repository,
        notifier=Mock(),
        sleep=lambda seconds: None,
    )
    return app


@pytest.fixture
def api(app):
    return TestClient(app)


def test_health_needs_no_auth(api):
    response = api.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/flights/schedules?date=2024-02-01"),
        ("get", "/flights/routes"),
        ("get", "/flights/collect-month"),
        ("post", "/flights/collect-month"),
        ("post", "/flights/collect"),
    ],
)
def test_endpoints_require_a_principal(api, method, path):
    response = getattr(api, method)(path, json={}) if method == "post" else api.get(path)

    assert response.status_code == 401
    assert "error" in response.json()


def test_unknown_token_is_rejected(api):
    response = api.get("/flights/routes", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401
    assert response.json() == {"error": "Invalid credentials"}


def test_session_cookie_is_accepted(api):
    response = api.get("/flights/routes", headers={"Cookie": "session=secret-token"})

    assert response.status_code == 200


def test_collect_month(api, run_repository):
    response = api.post("/flights/collect-month", json={"departureIata": "ceb", "month": "2024-02"}, headers=AUTH)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert (body["totalSaved"], body["totalDays"], body["totalApiCalls"]) == (162, 27, 58)
    assert body["failedDates"] == ["2024-02-28", "2024-02-29"]
    assert "162" in body["message"]

    [run] = run_repository.get_latest()
    assert run.departure_iata == "CEB"


@pytest.mark.parametrize(
    "body",
    [
        {"month": "2024-02"},
        {"departureIata": "CEB"},
        {"departureIata": "CEB", "month": "2024-13"},
        {"departureIata": "CEBU", "month": "2024-02"},
    ],
)
def test_collect_month_rejects_bad_input(api, run_repository, body):
    response = api.post("/flights/collect-month", json=body, headers=AUTH)

    assert response.status_code == 400
    assert "error" in response.json()
    assert run_repository.get_latest() == []


def test_malformed_json_body_is_a_bad_request(api):
    response = api.post(
        "/flights/collect-month",
        content=b"{not json",
        headers={**AUTH, "Content-Type": "application/json"},
    )

    assert response.status_code == 400


@pytest.mark.parametrize(
    "path, body",
    [
        ("/flights/collect-month", {"departureIata": "CEB", "month": "2024-13"}),
        ("/flights/collect-month", {"month": "2024-02"}),
        ("/flights/collect", {"departureIata": "ICN", "date": "2024-02-30", "timeSlot": "00-12"}),
    ],
)
def test_bad_input_is_rejected_without_a_provider_key(monkeypatch, store, run_repository, path, body):
    monkeypatch.setattr(settings.provider, "api_key", None)
    app = create_app()
    app.dependency_overrides[get_verifier] = lambda: StaticTokenVerifier(["secret-token"])
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_run_repository] = lambda: run_repository

    response = TestClient(app, raise_server_exceptions=False).post(path, json=body, headers=AUTH)

    assert response.status_code == 400
    assert "error" in response.json()
    assert run_repository.get_latest() == []


def test_valid_request_without_a_provider_key_is_a_generic_500(monkeypatch, store, run_repository):
    monkeypatch.setattr(settings.provider, "api_key", None)
    app = create_app()
    app.dependency_overrides[get_verifier] = lambda: StaticTokenVerifier(["secret-token"])
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_run_repository] = lambda: run_repository

    response = TestClient(app, raise_server_exceptions=False).post(
        "/flights/collect-month",
        json={"departureIata": "CEB", "month": "2024-02"},
        headers=AUTH,
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_list_collection_runs(api):
    api.post("/flights/collect-month", json={"departureIata": "CEB", "month": "2024-02"}, headers=AUTH)

    response = api.get("/flights/collect-month?limit=5", headers=AUTH)

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 1
    assert body["runs"][0]["status"] == "partial"


def test_schedules_by_date_and_route(api, store, make_record):
    store.save(make_record())
    store.save(make_record(arrival_iata="MNL", flight_number="KE623"))

    by_date = api.get("/flights/schedules", params={"date": "2024-02-01", "departureIata": "ICN"}, headers=AUTH)
    by_route = api.get(
        "/flights/schedules",
        params={"route": "ICN-MNL", "year": "2024", "month": "2", "date": "2024-02-01"},
        headers=AUTH,
    )

    assert by_date.status_code == 200
    assert by_date.json()["count"] == 2
    assert by_route.json()["count"] == 1
    assert by_route.json()["flights"][0]["flightNumber"] == "KE623"


@pytest.mark.parametrize(
    "params, message",
    [
        ({}, "date or year/month required"),
        ({"year": "2024", "month": "13"}, "Invalid year or month"),
    ],
)
def test_schedules_validation(api, params, message):
    response = api.get("/flights/schedules", params=params, headers=AUTH)

    assert response.status_code == 400
    assert response.json() == {"error": message}


def test_store_failure_is_a_generic_500(app):
    service = Mock()
    service.query.side_effect = StoreError("database disk image is malformed")
    app.dependency_overrides[get_query_service] = lambda: service

    response = TestClient(app).get("/flights/schedules?date=2024-02-01", headers=AUTH)

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_unexpected_failure_is_a_generic_500(app):
    service = Mock()
    service.query.side_effect = RuntimeError("secret internals")
    app.dependency_overrides[get_query_service] = lambda: service

    response = TestClient(app, raise_server_exceptions=False).get("/flights/schedules?date=2024-02-01", headers=AUTH)

    assert response.status_code == 500
    assert "secret internals" not in response.text


def test_collect_unit(api, unit_client):
    response = api.post(
        "/flights/collect",
        json={"departureIata": "icn", "date": "2024-02-01", "timeSlot": "00-12"},
        headers=AUTH,
    )

    assert response.status_code == 200
    assert response.json()["savedCount"] == 4
    args = unit_client.fetch_and_store.call_args.args
    assert args[:2] == ("ICN", "2024-02-01")


@pytest.mark.parametrize(
    "error, status",
    [
        (RateLimitError(retry_after=30), 429),
        (ProviderResponseError("API request failed: 503", status_code=503), 502),
    ],
)
def test_collect_unit_provider_failures(api, unit_client, error, status):
    unit_client.fetch_and_store.side_effect = error

    response = api.post(
        "/flights/collect",
        json={"departureIata": "ICN", "date": "2024-02-01", "timeSlot": "12-00"},
        headers=AUTH,
    )

    assert response.status_code == status
    assert "error" in response.json()
    if status == 429:
        assert response.headers["Retry-After"] == "30"


def test_collect_unit_rejects_bad_time_slot(api, unit_client):
    response = api.post(
        "/flights/collect",
        json={"departureIata": "ICN", "date": "2024-02-01", "timeSlot": "06-18"},
        headers=AUTH,
    )

    assert response.status_code == 400
    unit_client.fetch_and_store.assert_not_called()


def test_routes(api, store, make_record):
    store.save(make_record())

    response = api.get("/flights/routes", headers=AUTH)

    assert response.json() == {
        "success": True,
        "routes": [{"route": "ICN-CEB", "departureIata": "ICN", "arrivalIata": "CEB"}],
    }
