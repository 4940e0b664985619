"""Application entry point for the legal request bot."""

from __future__ import annotations

from pathlib import Path
from uuid import uuid4

from flask import Flask, jsonify, request
from slack_bolt import App as SlackApp
from slack_bolt.adapter.flask import SlackRequestHandler
from slack_sdk.errors import SlackApiError
import structlog
from structlog.contextvars import bind_contextvars, unbind_contextvars

from legal_request_bot.background import run_async
from legal_request_bot.config import AppSettings, get_settings
from legal_request_bot.intake import (
    FormLayout,
    LegalRequest,
    RequestFields,
    build_request_modal,
    parse_private_metadata,
    parse_submission,
    process_submission,
    relay_file_share,
    resolve_destination_channel,
)
from legal_request_bot.logging_config import configure_logging
from legal_request_bot.slack_client import SlackClient, describe_slack_error
from legal_request_bot.webhook import AutomationWebhook

LIVENESS_TEXT = "Legal Request Bot is running ✅"


def _create_bolt_app(settings: AppSettings) -> SlackApp:
    """Initialise the Slack Bolt application using validated settings."""

    return SlackApp(
        token=settings.bot_token,
        signing_secret=settings.signing_secret,
        token_verification_enabled=False,
    )


def _create_webhook(settings: AppSettings) -> AutomationWebhook:
    return AutomationWebhook(settings.apps_script_url, timeout=settings.webhook_timeout)


def _register_error_handlers(flask_app: Flask) -> None:
    """Register a JSON error handler that attaches a trace identifier."""

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        trace_id = str(uuid4())
        flask_app.logger.exception(
            "Unhandled application error", extra={"trace_id": trace_id}, exc_info=error
        )
        response = jsonify({"error": "internal_server_error", "trace_id": trace_id})
        response.status_code = 500
        return response


def _open_modal(client, trigger_id: str, view: dict, logger) -> None:
    log = structlog.get_logger()
    try:
        SlackClient(client=client).open_modal(trigger_id=trigger_id, view=view)
        log.info("modal_opened", callback_id=view.get("callback_id"))
    except SlackApiError as exc:
        error_code, status_code = describe_slack_error(exc)
        log.error("modal_open_failed", error=error_code, status_code=status_code)
        logger.error(
            "Failed to open legal request modal",
            extra={"error": error_code, "status_code": status_code},
        )


def _handle_legal_command(ack, command, client, logger, *, layout: FormLayout) -> None:
    trace_id = str(uuid4())
    bind_contextvars(trace_id=trace_id)
    log = structlog.get_logger().bind(trace_id=trace_id)

    try:
        ack()
        command = command or {}
        log.info(
            "slash_command_received",
            command=command.get("command"),
            user_id=command.get("user_id"),
            channel=command.get("channel_id"),
        )

        trigger_id = command.get("trigger_id")
        if not trigger_id:
            log.error("modal_open_failed", error="missing_trigger_id")
            return

        view = build_request_modal(
            layout,
            channel_id=command.get("channel_id"),
            user_id=command.get("user_id"),
        )
        run_async(_open_modal, client, trigger_id, view, logger, trace_id=trace_id)
    finally:
        unbind_contextvars("trace_id")


def _resolve_display_name(client, user: dict, logger) -> str:
    user_id = user.get("id") or "unknown"
    for key in ("name", "username"):
        name = (user.get(key) or "").strip()
        if name:
            return name

    if user_id == "unknown":
        return user_id
    try:
        return SlackClient(client=client).user_display_name(user_id)
    except SlackApiError as exc:
        error_code, _ = describe_slack_error(exc)
        structlog.get_logger().warning("user_lookup_failed", user_id=user_id, error=error_code)
        logger.warning("Failed to look up user", extra={"user_id": user_id, "error": error_code})
        return user_id


def _complete_submission(
    *,
    client,
    webhook: AutomationWebhook,
    fields: RequestFields,
    user: dict,
    invoking_channel: str | None,
    destination: str,
    post_confirmation: bool,
    logger,
) -> None:
    legal_request = LegalRequest.from_fields(
        fields,
        submitted_by=_resolve_display_name(client, user, logger),
        user_id=user.get("id") or "unknown",
        channel_id=invoking_channel,
    )
    process_submission(
        client=client,
        webhook=webhook,
        request=legal_request,
        channel=destination,
        logger=logger,
        post_confirmation=post_confirmation,
    )


def _handle_view_submission(
    ack,
    body,
    client,
    logger,
    *,
    settings: AppSettings,
    webhook: AutomationWebhook,
    layout: FormLayout,
) -> None:
    trace_id = str(uuid4())
    bind_contextvars(trace_id=trace_id)
    log = structlog.get_logger().bind(trace_id=trace_id)

    try:
        ack()
        body = body or {}
        view = body.get("view") or {}
        user = body.get("user") or {}
        metadata = parse_private_metadata(view.get("private_metadata"))

        fields = parse_submission((view.get("state") or {}).get("values"), layout)
        invoking_channel = (body.get("channel") or {}).get("id") or metadata.get("channel_id")
        destination = resolve_destination_channel(
            legal_channel_id=settings.legal_channel_id,
            invoking_channel_id=invoking_channel,
            default_channel_id=settings.default_channel_id,
        )
        log = log.bind(user_id=user.get("id"), channel=destination)
        log.info("submission_received", request_type=fields.request_type)

        if destination is None:
            log.error("summary_skipped", reason="no_destination_channel")
            logger.error(
                "No channel available for legal request summary",
                extra={"user_id": user.get("id")},
            )
            return

        run_async(
            _complete_submission,
            client=client,
            webhook=webhook,
            fields=fields,
            user=user,
            invoking_channel=invoking_channel,
            destination=destination,
            post_confirmation=settings.post_thread_confirmation,
            logger=logger,
            trace_id=trace_id,
        )
    finally:
        unbind_contextvars("trace_id")


def _handle_message_event(event, client, logger, *, webhook: AutomationWebhook) -> None:
    trace_id = str(uuid4())
    bind_contextvars(trace_id=trace_id)
    try:
        run_async(
            relay_file_share,
            client=client,
            webhook=webhook,
            event=event,
            logger=logger,
            trace_id=trace_id,
        )
    finally:
        unbind_contextvars("trace_id")


def _register_command_handlers(bolt_app: SlackApp, settings: AppSettings, layout: FormLayout) -> None:
    @bolt_app.command(settings.command_name)
    def handle_legal(ack, command, client, logger):
        _handle_legal_command(ack=ack, command=command, client=client, logger=logger, layout=layout)


def _register_view_handlers(
    bolt_app: SlackApp,
    settings: AppSettings,
    webhook: AutomationWebhook,
    layout: FormLayout,
) -> None:
    @bolt_app.view(layout.callback_id)
    def handle_submission(ack, body, client, logger):
        _handle_view_submission(
            ack=ack,
            body=body,
            client=client,
            logger=logger,
            settings=settings,
            webhook=webhook,
            layout=layout,
        )


def _register_event_handlers(bolt_app: SlackApp, webhook: AutomationWebhook) -> None:
    @bolt_app.event("message")
    def handle_message(event, client, logger):
        _handle_message_event(event=event, client=client, logger=logger, webhook=webhook)


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def create_app(
    *,
    webhook: AutomationWebhook | None = None,
    layout: FormLayout | None = None,
) -> Flask:
    """Create and configure the Flask application."""

    configure_logging()

    settings = get_settings()
    webhook = webhook or _create_webhook(settings)
    layout = layout or FormLayout()

    bolt_app = _create_bolt_app(settings)
    handler = SlackRequestHandler(bolt_app)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    flask_app.logger.setLevel("INFO")

    _register_error_handlers(flask_app)
    _register_command_handlers(bolt_app, settings, layout)
    _register_view_handlers(bolt_app, settings, webhook, layout)
    _register_event_handlers(bolt_app, webhook)

    @flask_app.route("/slack/events", methods=["POST"])
    def slack_events():
        return handler.handle(request)

    @flask_app.route("/", methods=["GET"])
    def liveness():
        return LIVENESS_TEXT, 200, {"Content-Type": "text/plain; charset=utf-8"}

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")
        try:
            current = get_settings()
            health["config"] = "valid"
            health["webhook"] = "configured" if current.webhook_enabled else "disabled"
        except RuntimeError as exc:
            health["config"] = "invalid"
            health["config_error"] = str(exc)
            health["ok"] = False
        status = 200 if health["ok"] else 503
        return jsonify(health), status

    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    application = create_app()
    application.run(host="0.0.0.0", port=get_settings().port)
