"""Tests for the legal request modal builder."""

import json
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from legal_request_bot.intake import FieldIds, FormLayout, RequestType, build_request_modal  # noqa: E402


def test_build_request_modal_has_three_required_inputs():
    view = build_request_modal()

    assert view["type"] == "modal"
    assert view["callback_id"] == "legal_request_form"
    assert view["title"]["text"] == "New Legal Request"
    assert view["submit"]["text"] == "Submit"
    assert view["close"]["text"] == "Cancel"

    blocks = view["blocks"]
    assert [block["block_id"] for block in blocks] == ["type_block", "counterparty_block", "description_block"]
    assert all(block["type"] == "input" for block in blocks)
    assert all(block["optional"] is False for block in blocks)


def test_request_type_is_single_select_with_fixed_options():
    select = build_request_modal()["blocks"][0]["element"]

    assert select["type"] == "static_select"
    assert select["action_id"] == "request_type"
    assert [option["value"] for option in select["options"]] == [
        "Procurement",
        "Revenue / Collaboration",
        "Other",
    ]
    assert [option.value for option in RequestType] == [option["value"] for option in select["options"]]


def test_text_inputs_single_and_multi_line():
    _, counterparty, description = build_request_modal()["blocks"]

    assert counterparty["element"]["type"] == "plain_text_input"
    assert counterparty["element"]["action_id"] == "counterparty_input"
    assert "multiline" not in counterparty["element"]
    assert description["element"]["type"] == "plain_text_input"
    assert description["element"]["action_id"] == "description_input"
    assert description["element"]["multiline"] is True


def test_private_metadata_carries_invoking_channel_and_user():
    view = build_request_modal(channel_id="C42", user_id="U7")

    assert json.loads(view["private_metadata"]) == {"channel_id": "C42", "user_id": "U7"}


def test_private_metadata_empty_without_context():
    assert json.loads(build_request_modal()["private_metadata"]) == {}


def test_custom_layout_identifiers_are_used():
    layout = FormLayout(
        callback_id="contract_intake",
        counterparty=FieldIds(block_id="party", action_id="party_name"),
    )

    view = build_request_modal(layout)

    assert view["callback_id"] == "contract_intake"
    assert view["blocks"][1]["block_id"] == "party"
    assert view["blocks"][1]["element"]["action_id"] == "party_name"


def test_modal_title_is_within_slack_limit():
    title = build_request_modal()["title"]["text"]

    assert title == "New Legal Request"
    assert len(title) <= 24
