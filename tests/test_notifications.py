"""Tests for publishing requests to Slack and the automation webhook."""

from __future__ import annotations

from datetime import datetime
import logging

from slack_sdk.errors import SlackApiError
import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars
from structlog.testing import capture_logs

from legal_request_bot.intake import LegalRequest, ThreadReference, notifications
from legal_request_bot.webhook import WebhookResult


class DummyResponse(dict):
    """Minimal Slack response stub for error handling tests."""

    def __init__(self, error: str = "channel_not_found", status_code: int = 404) -> None:
        super().__init__({"error": error})
        self.status_code = status_code


class DummySlackWebClient:
    def __init__(self, *, fail_on_post: int | None = None):
        self.calls = []
        self._fail_on_post = fail_on_post

    def chat_postMessage(self, **kwargs):
        self.calls.append(kwargs)
        if self._fail_on_post == len(self.calls):
            raise SlackApiError("post failed", DummyResponse())
        return {"ok": True, "channel": "CPOSTED", "ts": "1700000000.000100"}


class DummyWebhook:
    def __init__(self, result: WebhookResult | None = None):
        self.payloads = []
        self._result = result or WebhookResult(delivered=True, status_code=200)

    @property
    def enabled(self) -> bool:
        return True

    def send(self, payload):
        self.payloads.append(payload.model_dump(mode="json", by_alias=True))
        return self._result


def _request() -> LegalRequest:
    return LegalRequest(
        request_type="Revenue / Collaboration",
        counterparty="Globex",
        description="Joint marketing agreement",
        submitted_by="bob",
        user_id="U2",
        channel_id="CINVOKE",
    )


def test_publish_summary_returns_thread_reference():
    client = DummySlackWebClient()

    thread = notifications.publish_summary(
        client=client,
        request=_request(),
        channel="CLEGAL",
        logger=logging.getLogger(__name__),
    )

    assert thread == ThreadReference(channel_id="CPOSTED", thread_ts="1700000000.000100")
    assert client.calls[0]["channel"] == "CLEGAL"
    assert "Globex" in client.calls[0]["blocks"][0]["text"]["text"]


def test_publish_summary_logs_slack_failure():
    clear_contextvars()
    bind_contextvars(trace_id="trace-xyz")

    with capture_logs(processors=[structlog.contextvars.merge_contextvars]) as logs:
        thread = notifications.publish_summary(
            client=DummySlackWebClient(fail_on_post=1),
            request=_request(),
            channel="CLEGAL",
            logger=logging.getLogger(__name__),
        )

    clear_contextvars()

    assert thread is None
    event = next(entry for entry in logs if entry.get("event") == "summary_post_failed")
    assert event.get("trace_id") == "trace-xyz"
    assert event.get("channel") == "CLEGAL"
    assert event.get("error") == "channel_not_found"
    assert event.get("status_code") == 404


def test_process_submission_posts_forwards_and_confirms():
    client = DummySlackWebClient()
    webhook = DummyWebhook(WebhookResult(delivered=True, status_code=200, folder_url="https://drive/f"))
    request = _request()

    result = notifications.process_submission(
        client=client,
        webhook=webhook,
        request=request,
        channel="CLEGAL",
        logger=logging.getLogger(__name__),
    )

    assert result.delivered is True
    (payload,) = webhook.payloads
    assert payload["type"] == "new_request"
    assert payload["requestType"] == "Revenue / Collaboration"
    assert payload["counterparty"] == "Globex"
    assert payload["description"] == "Joint marketing agreement"
    assert payload["submittedBy"] == "bob"
    assert payload["channel"] == "CPOSTED"
    assert payload["thread_ts"] == "1700000000.000100"
    assert datetime.fromisoformat(payload["timestamp"]) == request.created_at

    summary, confirmation = client.calls
    assert "thread_ts" not in summary
    assert confirmation["channel"] == "CPOSTED"
    assert confirmation["thread_ts"] == "1700000000.000100"
    assert "https://drive/f" in confirmation["text"]


def test_process_submission_without_confirmation():
    client = DummySlackWebClient()

    notifications.process_submission(
        client=client,
        webhook=DummyWebhook(),
        request=_request(),
        channel="CLEGAL",
        logger=logging.getLogger(__name__),
        post_confirmation=False,
    )

    assert len(client.calls) == 1


def test_process_submission_stops_when_summary_fails():
    webhook = DummyWebhook()

    result = notifications.process_submission(
        client=DummySlackWebClient(fail_on_post=1),
        webhook=webhook,
        request=_request(),
        channel="CLEGAL",
        logger=logging.getLogger(__name__),
    )

    assert result is None
    assert webhook.payloads == []


def test_confirmation_failure_is_swallowed():
    client = DummySlackWebClient(fail_on_post=2)

    with capture_logs() as logs:
        result = notifications.process_submission(
            client=client,
            webhook=DummyWebhook(),
            request=_request(),
            channel="CLEGAL",
            logger=logging.getLogger(__name__),
        )

    assert result.delivered is True
    assert any(entry["event"] == "thread_confirmation_failed" for entry in logs)
