"""Utilities for parsing legal request modal submissions."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ValidationError

from .models import NOT_PROVIDED, NOT_SELECTED, FieldIds, FormLayout, RequestFields


class SelectedOption(BaseModel):
    value: str | None = None


class SubmissionValue(BaseModel):
    """Represents a single input value coming from Slack modal state."""

    value: str | None = None
    selected_option: SelectedOption | None = None

    def resolved(self) -> str | None:
        if self.selected_option is not None:
            return self.selected_option.value
        return self.value


class SubmissionState(BaseModel):
    """Model to validate Slack modal state payloads."""

    values: Dict[str, Dict[str, SubmissionValue]] = {}


def _clean(raw: str | None) -> str | None:
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None


def _lookup(state: SubmissionState, ids: FieldIds) -> str | None:
    block = state.values.get(ids.block_id, {})
    if ids.action_id in block:
        return _clean(block[ids.action_id].resolved())
    # fall back to the only element in the block if the action id drifted
    if len(block) == 1:
        return _clean(next(iter(block.values())).resolved())
    return None


def parse_submission(values: Mapping[str, Any] | None, layout: FormLayout | None = None) -> RequestFields:
    """Extract the request fields from ``view.state.values``.

    Missing or blank values are replaced by placeholders; a malformed state
    payload yields a submission made entirely of placeholders.
    """

    layout = layout or FormLayout()
    try:
        state = SubmissionState.model_validate({"values": values or {}})
    except ValidationError:
        state = SubmissionState()

    return RequestFields(
        request_type=_lookup(state, layout.request_type) or NOT_SELECTED,
        counterparty=_lookup(state, layout.counterparty) or NOT_PROVIDED,
        description=_lookup(state, layout.description) or NOT_PROVIDED,
    )


def parse_private_metadata(raw: str | None) -> Dict[str, str]:
    """Decode the JSON stashed in the modal's ``private_metadata``."""

    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if not isinstance(data, dict):
        return {}
    return {key: value for key, value in data.items() if isinstance(value, str) and value}


def resolve_destination_channel(
    *,
    legal_channel_id: str | None,
    invoking_channel_id: str | None,
    default_channel_id: str | None,
) -> str | None:
    """Pick the channel the summary is posted to.

    Order: the configured legal channel, then the channel the command was
    invoked from, then the configured default channel.
    """

    for candidate in (legal_channel_id, invoking_channel_id, default_channel_id):
        if candidate:
            return candidate
    return None
