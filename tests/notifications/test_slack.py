"""Tests for Slack collection notifications."""

import json
from unittest.mock import Mock

import httpx

from src.ingestion.jobs.collect_month import CollectionSummary
from src.notifications import CollectionNotifier, NotificationSettings, SlackNotifier, SlackSettings


WEBHOOK = "https://hooks.slack.test/services/T000/B000/XXX"
TOTALS = {"totalSaved": 162, "totalDays": 27, "totalApiCalls": 58}


def make_config(**slack) -> NotificationSettings:
    return NotificationSettings(slack=SlackSettings(**slack), environment="test")


def test_failure_message_is_posted():
    posted = []

    def handler(request: httpx.Request) -> httpx.Response:
        posted.append(json.loads(request.content))
        return httpx.Response(200, text="ok")

    notifier = SlackNotifier(webhook_url=WEBHOOK, config=make_config(), transport=httpx.MockTransport(handler))

    sent = notifier.notify_failure("CEB", "2024-02", TOTALS, ["2024-02-28", "2024-02-29"], "provider down", run_id=7)

    assert sent is True
    [payload] = posted
    text = json.dumps(payload)
    assert "CEB 2024-02" in text
    assert "2024-02-28, 2024-02-29" in text
    assert "Run 7" in text


def test_webhook_error_is_reported_not_raised():
    notifier = SlackNotifier(
        webhook_url=WEBHOOK,
        config=make_config(),
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="invalid_payload")),
    )

    assert notifier.notify_failure("CEB", "2024-02", TOTALS, ["2024-02-28"]) is False


def test_unreachable_webhook_is_reported_not_raised():
    def refuse(request):
        raise httpx.ConnectError("no route", request=request)

    notifier = SlackNotifier(webhook_url=WEBHOOK, config=make_config(), transport=httpx.MockTransport(refuse))

    assert notifier.notify_failure("CEB", "2024-02", TOTALS, ["2024-02-28"]) is False


def test_disabled_without_webhook():
    handler = Mock()
    notifier = SlackNotifier(config=make_config(webhook_url=None), transport=httpx.MockTransport(handler))

    assert notifier.enabled is False
    assert notifier.notify_failure("CEB", "2024-02", TOTALS, ["2024-02-28"]) is False
    handler.assert_not_called()


def test_success_is_quiet_unless_enabled():
    posted = []

    def handler(request):
        posted.append(request)
        return httpx.Response(200)

    quiet = SlackNotifier(webhook_url=WEBHOOK, config=make_config(), transport=httpx.MockTransport(handler))
    loud = SlackNotifier(
        webhook_url=WEBHOOK,
        config=make_config(notify_on_success=True),
        transport=httpx.MockTransport(handler),
    )

    assert quiet.notify_success("CEB", "2024-02", TOTALS) is False
    assert loud.notify_success("CEB", "2024-02", TOTALS, duration_seconds=12.5) is True
    assert len(posted) == 1


def test_collection_notifier_routes_by_outcome():
    slack = Mock()
    notifier = CollectionNotifier(slack=slack)

    notifier.on_complete(CollectionSummary("CEB", "2024-02", total_days=29, total_api_calls=58))
    slack.notify_success.assert_called_once()
    slack.notify_failure.assert_not_called()

    partial = CollectionSummary(
        "CEB", "2024-02", total_days=27, failed_dates=["2024-02-28"], errors=["2024-02-28 00-12: boom"], run_id=3
    )
    notifier.on_complete(partial)

    kwargs = slack.notify_failure.call_args.kwargs
    assert kwargs["failed_dates"] == ["2024-02-28"]
    assert kwargs["run_id"] == 3
    assert kwargs["error_message"] == "2024-02-28 00-12: boom"
