"""Pydantic-based configuration helpers for the legal request bot."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Iterable, List

from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, ValidationError, field_validator

_HTTP_URL = TypeAdapter(HttpUrl)


class AppSettings(BaseModel):
    """Settings required to initialise the Slack bot and the automation webhook."""

    bot_token: str = Field(..., alias="SLACK_BOT_TOKEN")
    signing_secret: str = Field(..., alias="SLACK_SIGNING_SECRET")
    legal_channel_id: str | None = Field(None, alias="LEGAL_CHANNEL_ID")
    default_channel_id: str | None = Field(None, alias="DEFAULT_CHANNEL_ID")
    apps_script_url: str | None = Field(None, alias="APPS_SCRIPT_URL")
    port: int = Field(3000, alias="PORT")
    command_name: str = Field("/legal", alias="LEGAL_COMMAND")
    webhook_timeout: float = Field(10.0, alias="WEBHOOK_TIMEOUT_SECONDS")
    post_thread_confirmation: bool = Field(True, alias="POST_THREAD_CONFIRMATION")

    @field_validator("bot_token", "signing_secret", mode="before")
    @classmethod
    def _require_value(cls, value: str | None) -> str | None:
        if isinstance(value, str) and not value.strip():
            # blank counts as missing
            return None
        return value

    @field_validator("legal_channel_id", "default_channel_id", "apps_script_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        trimmed = str(value).strip()
        return trimmed or None

    @field_validator("apps_script_url")
    @classmethod
    def _valid_webhook_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError as exc:
            raise ValueError("APPS_SCRIPT_URL must be an http(s) URL") from exc
        return value

    @field_validator("port")
    @classmethod
    def _valid_port(cls, value: int) -> int:
        if not 0 < value < 65536:
            raise ValueError("PORT must be between 1 and 65535")
        return value

    @field_validator("command_name")
    @classmethod
    def _slash_prefixed(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith("/") or len(value) < 2:
            raise ValueError("LEGAL_COMMAND must look like '/legal'")
        return value

    @field_validator("webhook_timeout")
    @classmethod
    def _ensure_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Webhook timeout must be greater than zero")
        return value

    @property
    def webhook_enabled(self) -> bool:
        return self.apps_script_url is not None


def _format_missing(fields: Iterable[str]) -> str:
    """Return a human-friendly comma-separated list of missing env vars."""

    unique: List[str] = []
    for field in fields:
        if field not in unique:
            unique.append(field)
    return ", ".join(unique)


@lru_cache()
def get_settings() -> AppSettings:
    """Fetch and cache settings from environment variables."""

    try:
        return AppSettings.model_validate(os.environ)
    except ValidationError as exc:
        missing = [
            str(error["loc"][0])
            for error in exc.errors()
            if error["type"] in {"missing", "string_type"}
        ]
        if missing:
            message = (
                "Missing required environment variables: "
                f"{_format_missing(missing)}"
            )
        else:
            invalid = [str(error["loc"][0]) for error in exc.errors()]
            message = f"Invalid environment variables: {_format_missing(invalid)}"
        raise RuntimeError(message) from exc
