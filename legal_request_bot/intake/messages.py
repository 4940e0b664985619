"""Block Kit message builders for legal requests."""

from __future__ import annotations

from typing import Any, Dict

from .models import LegalRequest

THREAD_CONFIRMATION_TEXT = (
    "✅ Request recorded successfully. Please attach all relevant documents in this thread."
)


def _summary_headline(request: LegalRequest) -> str:
    return f"🧾 *New Legal Request Submitted by* {request.submitted_by}"


def build_summary_message(request: LegalRequest) -> Dict[str, Any]:
    """Build the channel message announcing a new legal request."""

    headline = _summary_headline(request)
    lines = [
        f"• *Type:* {request.request_type}",
        f"• *Counterparty:* {request.counterparty}",
        f"• *Description:* {request.description}",
        f"• *Submitted by:* {request.submitted_by}",
    ]

    return {
        "text": headline,
        "blocks": [
            {
                "type": "section",
                "text": {
                    "type": "mrkdwn",
                    "text": headline + "\n\n" + "\n".join(lines),
                },
            }
        ],
    }


def build_thread_confirmation(folder_url: str | None = None) -> str:
    if folder_url:
        return f"{THREAD_CONFIRMATION_TEXT}\n📁 <{folder_url}|Open the request folder>"
    return THREAD_CONFIRMATION_TEXT


def build_file_confirmation(file_name: str) -> str:
    return f"📎 File *{file_name}* uploaded and saved successfully."
