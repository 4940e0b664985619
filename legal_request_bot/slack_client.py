"""Thin wrapper utilities around the Slack WebClient."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError


@dataclass(frozen=True)
class FileInfo:
    """The subset of ``files.info`` the attachment relay needs."""

    file_id: str
    name: str
    download_url: str | None


def describe_slack_error(exc: SlackApiError) -> tuple[str, int | None]:
    """Return the Slack error code and HTTP status carried by *exc*."""

    response = getattr(exc, "response", None)
    if response is None:
        return str(exc), None
    status_code = getattr(response, "status_code", None)
    error_code = response.get("error") or str(exc)
    return error_code, status_code


class SlackClient:
    """Encapsulate Slack WebClient interactions for easier testing."""

    def __init__(self, *, token: str | None = None, client: WebClient | None = None) -> None:
        if client is None and token is None:
            raise ValueError("Either an instantiated client or a bot token must be provided.")

        self._client = client or WebClient(token=token)

    @property
    def client(self) -> WebClient:
        """Expose the underlying WebClient for advanced use cases."""

        return self._client

    def open_modal(self, *, trigger_id: str, view: Mapping[str, Any]) -> Mapping[str, Any]:
        return self._client.views_open(trigger_id=trigger_id, view=dict(view))

    def post_message(
        self,
        *,
        channel: str,
        text: str,
        blocks: Sequence[Mapping[str, Any]] | None = None,
        thread_ts: str | None = None,
    ) -> Mapping[str, Any]:
        """Post a message, optionally with Block Kit content or as a thread reply."""

        kwargs: dict[str, Any] = {"channel": channel, "text": text}
        if blocks is not None:
            kwargs["blocks"] = list(blocks)
        if thread_ts is not None:
            kwargs["thread_ts"] = thread_ts
        return self._client.chat_postMessage(**kwargs)

    def file_info(self, file_id: str) -> FileInfo:
        """Look up a file and resolve its private download URL."""

        response = self._client.files_info(file=file_id)
        data = response.get("file") or {}
        download_url = data.get("url_private_download") or data.get("url_private")
        return FileInfo(
            file_id=data.get("id") or file_id,
            name=data.get("name") or data.get("title") or file_id,
            download_url=download_url,
        )

    def user_display_name(self, user_id: str) -> str:
        """Return the best available human-readable name for *user_id*."""

        response = self._client.users_info(user=user_id)
        user = response.get("user") or {}
        profile = user.get("profile") or {}
        for candidate in (
            profile.get("display_name"),
            profile.get("real_name"),
            user.get("real_name"),
            user.get("name"),
        ):
            if candidate and candidate.strip():
                return candidate.strip()
        return user_id
