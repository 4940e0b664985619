"""Publishing legal requests to Slack and to the automation webhook."""

from __future__ import annotations

import structlog
from slack_sdk.errors import SlackApiError

from legal_request_bot.slack_client import SlackClient, describe_slack_error
from legal_request_bot.webhook import AutomationWebhook, WebhookResult

from .messages import build_summary_message, build_thread_confirmation
from .models import LegalRequest, NewRequestPayload, ThreadReference


def publish_summary(
    *,
    client,
    request: LegalRequest,
    channel: str,
    logger,
) -> ThreadReference | None:
    """Post the request summary and return the thread it anchors."""

    slack_client = SlackClient(client=client)
    log = structlog.get_logger().bind(channel=channel, user_id=request.user_id)
    message = build_summary_message(request)

    try:
        response = slack_client.post_message(
            channel=channel,
            text=message["text"],
            blocks=message["blocks"],
        )
    except SlackApiError as exc:
        error_code, status_code = describe_slack_error(exc)
        log.error("summary_post_failed", error=error_code, status_code=status_code)
        logger.error(
            "Failed to post legal request summary",
            extra={"channel": channel, "error": error_code},
        )
        return None

    channel_id = response.get("channel") or channel
    ts = response.get("ts")
    if not ts:
        log.warning("summary_post_failed", error="missing_ts", response_keys=list(response.keys()))
        return None

    thread = ThreadReference(channel_id=channel_id, thread_ts=ts)
    log.info("summary_posted", thread_ts=thread.thread_ts, posted_channel=thread.channel_id)
    return thread


def post_thread_confirmation(
    *,
    client,
    thread: ThreadReference,
    logger,
    folder_url: str | None = None,
) -> bool:
    slack_client = SlackClient(client=client)
    try:
        slack_client.post_message(
            channel=thread.channel_id,
            thread_ts=thread.thread_ts,
            text=build_thread_confirmation(folder_url),
        )
    except SlackApiError as exc:
        error_code, status_code = describe_slack_error(exc)
        structlog.get_logger().error(
            "thread_confirmation_failed",
            channel=thread.channel_id,
            thread_ts=thread.thread_ts,
            error=error_code,
            status_code=status_code,
        )
        logger.error(
            "Failed to post request confirmation",
            extra={"channel": thread.channel_id, "error": error_code},
        )
        return False
    return True


def process_submission(
    *,
    client,
    webhook: AutomationWebhook,
    request: LegalRequest,
    channel: str,
    logger,
    post_confirmation: bool = True,
) -> WebhookResult | None:
    """Run everything that follows the acknowledgment of a submission.

    Posts the summary, forwards the ``new_request`` payload and, when asked
    to, confirms in the new thread. Returns the webhook outcome, or ``None``
    when the summary could not be posted.
    """

    thread = publish_summary(client=client, request=request, channel=channel, logger=logger)
    if thread is None:
        return None

    result = webhook.send(NewRequestPayload.build(request, thread))

    if post_confirmation:
        post_thread_confirmation(
            client=client,
            thread=thread,
            logger=logger,
            folder_url=result.folder_url,
        )
    return result
