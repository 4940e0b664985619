"""Builder for the legal request modal."""

from __future__ import annotations

import json
from typing import Any, Dict, List

from .models import FieldIds, FormLayout, RequestType

MODAL_TITLE = "New Legal Request"
MAX_METADATA_LENGTH = 3000


def _plain_text(text: str) -> Dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _input_block(ids: FieldIds, label: str, element: Dict[str, Any]) -> Dict[str, Any]:
    element = {**element, "action_id": ids.action_id}
    return {
        "type": "input",
        "block_id": ids.block_id,
        "label": _plain_text(label),
        "element": element,
        "optional": False,
    }


def _request_type_options() -> List[Dict[str, Any]]:
    return [{"text": _plain_text(option.value), "value": option.value} for option in RequestType]


def _private_metadata(channel_id: str | None, user_id: str | None) -> str:
    state = {key: value for key, value in (("channel_id", channel_id), ("user_id", user_id)) if value}
    metadata = json.dumps(state, separators=(",", ":"))
    if len(metadata) > MAX_METADATA_LENGTH:
        return "{}"
    return metadata


def build_request_modal(
    layout: FormLayout | None = None,
    *,
    channel_id: str | None = None,
    user_id: str | None = None,
) -> Dict[str, Any]:
    """Build the Slack modal payload for a new legal request.

    The invoking channel and user are carried in ``private_metadata`` since
    view submissions from a slash command modal do not include a channel.
    """

    layout = layout or FormLayout()

    blocks = [
        _input_block(
            layout.request_type,
            "Request Type",
            {
                "type": "static_select",
                "placeholder": _plain_text("Select a request type"),
                "options": _request_type_options(),
            },
        ),
        _input_block(
            layout.counterparty,
            "Counterparty",
            {
                "type": "plain_text_input",
                "placeholder": _plain_text("Enter counterparty name"),
            },
        ),
        _input_block(
            layout.description,
            "Description",
            {
                "type": "plain_text_input",
                "multiline": True,
                "placeholder": _plain_text("Briefly describe the request"),
            },
        ),
    ]

    return {
        "type": "modal",
        "callback_id": layout.callback_id,
        "private_metadata": _private_metadata(channel_id, user_id),
        "title": _plain_text(MODAL_TITLE),
        "submit": _plain_text("Submit"),
        "close": _plain_text("Cancel"),
        "blocks": blocks,
    }
