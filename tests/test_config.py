"""Tests for settings parsing and error categorization."""

import pytest

from src.config import PHILIPPINE_AIRPORTS, CollectionSettings, Settings
from src.notifications import NotificationSettings
from src.utils.exceptions import (
    APITimeoutError,
    PartialWriteError,
    RateLimitError,
    ValidationError,
    categorize_error,
)


def test_collection_defaults_track_philippine_airports():
    collection = CollectionSettings()

    assert collection.intra_day_delay_seconds == 2.0
    assert collection.inter_day_delay_seconds == 3.0
    assert collection.tracked_airport_codes == frozenset(PHILIPPINE_AIRPORTS)


def test_airport_lists_come_from_environment(monkeypatch):
    monkeypatch.setenv("COLLECTION_TRACKED_AIRPORTS", "ceb, mnl ,")
    monkeypatch.setenv("AUTH_API_TOKENS", "one,two")

    settings = Settings()

    assert settings.collection.tracked_airport_codes == {"CEB", "MNL"}
    assert settings.auth.token_set == {"one", "two"}


@pytest.mark.parametrize(
    "error, category",
    [
        (RateLimitError(retry_after=60), "RATE_LIMIT"),
        (APITimeoutError("slow", timeout=30), "API_TIMEOUT"),
        (PartialWriteError("locked", layout="route_month", record_id="ICN-CEB_KE631_2024-02-01"), "PARTIAL_WRITE"),
        (ValidationError("bad month"), "VALIDATION"),
        (KeyError("x"), "UNEXPECTED"),
    ],
)
def test_categorize_error(error, category):
    assert categorize_error(error)[0] == category


def test_notification_settings_come_from_environment(monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.test/T000/B000")
    monkeypatch.setenv("SLACK_NOTIFY_ON_SUCCESS", "true")
    monkeypatch.setenv("NOTIFY_ENVIRONMENT", "staging")

    config = NotificationSettings()

    assert config.slack.webhook_url == "https://hooks.slack.test/T000/B000"
    assert config.slack.notify_on_success is True
    assert config.slack.timeout_seconds == 10.0
    assert config.environment == "staging"
