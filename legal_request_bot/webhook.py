"""HTTP client for the external automation webhook (Google Apps Script)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import httpx
from pydantic import BaseModel
import structlog

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class WebhookResult:
    """Outcome of a single webhook delivery attempt."""

    delivered: bool
    status_code: int | None = None
    folder_url: str | None = None
    skipped: bool = False


SKIPPED = WebhookResult(delivered=False, skipped=True)


def _serialise(payload: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_none=True)
    return dict(payload)


def _extract_folder_url(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    folder_url = body.get("folderUrl")
    if isinstance(folder_url, str) and folder_url.strip():
        return folder_url.strip()
    return None


class AutomationWebhook:
    """POST JSON payloads to the automation endpoint, never raising.

    A webhook without a URL is disabled: :meth:`send` returns a skipped
    result without touching the network. Transport failures and non-2xx
    responses are logged as ``webhook_failed`` and reported through the
    returned :class:`WebhookResult`.
    """

    def __init__(
        self,
        url: str | None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url or None
        self._timeout = timeout
        self._client = client
        self._transport = transport

    @property
    def url(self) -> str | None:
        return self._url

    @property
    def enabled(self) -> bool:
        return self._url is not None

    def _post(self, body: dict[str, Any]) -> httpx.Response:
        if self._client is not None:
            return self._client.post(self._url, json=body, timeout=self._timeout)
        # Apps Script answers POSTs with a 302 to the script's output.
        with httpx.Client(
            timeout=self._timeout,
            transport=self._transport,
            follow_redirects=True,
        ) as http:
            return http.post(self._url, json=body)

    def send(self, payload: BaseModel | Mapping[str, Any]) -> WebhookResult:
        body = _serialise(payload)
        log = structlog.get_logger().bind(payload_type=body.get("type"))

        if not self.enabled:
            log.info("webhook_skipped", reason="APPS_SCRIPT_URL not configured")
            return SKIPPED

        try:
            response = self._post(body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            log.error(
                "webhook_failed",
                status_code=exc.response.status_code,
                error=f"HTTP {exc.response.status_code}",
            )
            return WebhookResult(delivered=False, status_code=exc.response.status_code)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            # httpx reports some malformed URLs as a bare ValueError
            log.error("webhook_failed", error=str(exc) or type(exc).__name__, error_type=type(exc).__name__)
            return WebhookResult(delivered=False)

        folder_url = _extract_folder_url(response)
        log.info("webhook_delivered", status_code=response.status_code, folder_url=folder_url)
        return WebhookResult(delivered=True, status_code=response.status_code, folder_url=folder_url)
