"""Relaying files shared inside request threads to the automation webhook."""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from slack_sdk.errors import SlackApiError

from legal_request_bot.slack_client import SlackClient, describe_slack_error
from legal_request_bot.webhook import AutomationWebhook

from .messages import build_file_confirmation
from .models import FileAttachmentEvent, FileUploadPayload

FILE_SHARE_SUBTYPE = "file_share"


def first_shared_file(event: Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    """Return the first file of a threaded ``file_share`` message, else ``None``."""

    event = event or {}
    log = structlog.get_logger().bind(channel=event.get("channel"))

    if event.get("subtype") != FILE_SHARE_SUBTYPE:
        return None
    if not event.get("thread_ts"):
        log.info("file_share_ignored", reason="not_in_thread")
        return None

    files = event.get("files") or []
    if not files or not isinstance(files[0], Mapping) or not files[0].get("id"):
        log.info("file_share_ignored", reason="no_files")
        return None
    return files[0]


def resolve_attachment(*, client, event: Mapping[str, Any], file: Mapping[str, Any], logger) -> FileAttachmentEvent | None:
    slack_client = SlackClient(client=client)
    file_id = file["id"]
    log = structlog.get_logger().bind(file_id=file_id, channel=event.get("channel"))

    try:
        info = slack_client.file_info(file_id)
    except SlackApiError as exc:
        error_code, status_code = describe_slack_error(exc)
        log.error("file_lookup_failed", error=error_code, status_code=status_code)
        logger.error(
            "Failed to look up shared file",
            extra={"file_id": file_id, "error": error_code},
        )
        return None

    if not info.download_url:
        log.error("file_lookup_failed", error="missing_download_url")
        return None

    return FileAttachmentEvent(
        file_id=info.file_id,
        file_name=info.name,
        download_url=info.download_url,
        channel_id=event["channel"],
        thread_ts=event["thread_ts"],
    )


def relay_file_share(
    *,
    client,
    webhook: AutomationWebhook,
    event: Mapping[str, Any] | None,
    logger,
) -> FileAttachmentEvent | None:
    """Forward a file shared in a request thread and confirm it in the thread.

    Returns the relayed attachment, or ``None`` when the event was ignored
    or any step failed. Nothing is raised.
    """

    file = first_shared_file(event)
    if file is None:
        return None

    if not webhook.enabled:
        structlog.get_logger().info(
            "webhook_skipped",
            payload_type="file_upload",
            reason="APPS_SCRIPT_URL not configured",
        )
        return None

    attachment = resolve_attachment(client=client, event=event, file=file, logger=logger)
    if attachment is None:
        return None

    log = structlog.get_logger().bind(
        file_id=attachment.file_id,
        channel=attachment.channel_id,
        thread_ts=attachment.thread_ts,
    )
    result = webhook.send(FileUploadPayload.build(attachment))
    if not result.delivered:
        return None

    try:
        SlackClient(client=client).post_message(
            channel=attachment.channel_id,
            thread_ts=attachment.thread_ts,
            text=build_file_confirmation(attachment.file_name),
        )
    except SlackApiError as exc:
        error_code, status_code = describe_slack_error(exc)
        log.error("file_confirmation_failed", error=error_code, status_code=status_code)
        logger.error(
            "Failed to confirm relayed file",
            extra={"file_id": attachment.file_id, "error": error_code},
        )

    log.info("file_relayed", file_name=attachment.file_name)
    return attachment
