"""Pydantic models describing legal requests and the payloads derived from them."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

NOT_SELECTED = "not selected"
NOT_PROVIDED = "N/A"


class RequestType(str, Enum):
    PROCUREMENT = "Procurement"
    REVENUE_COLLABORATION = "Revenue / Collaboration"
    OTHER = "Other"


class FieldIds(BaseModel):
    """Block and action identifiers of a single modal input."""

    model_config = ConfigDict(frozen=True)

    block_id: str
    action_id: str


class FormLayout(BaseModel):
    """Identifiers used when building and parsing the request modal."""

    model_config = ConfigDict(frozen=True)

    callback_id: str = "legal_request_form"
    request_type: FieldIds = FieldIds(block_id="type_block", action_id="request_type")
    counterparty: FieldIds = FieldIds(block_id="counterparty_block", action_id="counterparty_input")
    description: FieldIds = FieldIds(block_id="description_block", action_id="description_input")

    @field_validator("callback_id")
    @classmethod
    def validate_callback_id(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("callback_id must be a non-empty string")
        return value.strip()


class RequestFields(BaseModel):
    """Values extracted from a modal submission, with placeholders applied."""

    request_type: str = NOT_SELECTED
    counterparty: str = NOT_PROVIDED
    description: str = NOT_PROVIDED


class LegalRequest(BaseModel):
    """A submitted request. Lives only for the duration of one handler call."""

    request_type: str
    counterparty: str
    description: str
    submitted_by: str
    user_id: str
    channel_id: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def from_fields(
        cls,
        fields: RequestFields,
        *,
        submitted_by: str,
        user_id: str,
        channel_id: str | None = None,
    ) -> "LegalRequest":
        return cls(
            request_type=fields.request_type,
            counterparty=fields.counterparty,
            description=fields.description,
            submitted_by=submitted_by,
            user_id=user_id,
            channel_id=channel_id,
        )


class ThreadReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    channel_id: str
    thread_ts: str


class FileAttachmentEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_id: str
    file_name: str
    download_url: str
    channel_id: str
    thread_ts: str


class NewRequestPayload(BaseModel):
    """Body of the ``new_request`` webhook call."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["new_request"] = "new_request"
    request_type: str = Field(..., alias="requestType")
    counterparty: str
    description: str
    submitted_by: str = Field(..., alias="submittedBy")
    channel: str
    thread_ts: str
    timestamp: datetime | None = None

    @classmethod
    def build(cls, request: LegalRequest, thread: ThreadReference) -> "NewRequestPayload":
        return cls(
            request_type=request.request_type,
            counterparty=request.counterparty,
            description=request.description,
            submitted_by=request.submitted_by,
            channel=thread.channel_id,
            thread_ts=thread.thread_ts,
            timestamp=request.created_at,
        )


class FileUploadPayload(BaseModel):
    """Body of the ``file_upload`` webhook call."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["file_upload"] = "file_upload"
    channel: str
    thread_ts: str
    file_name: str = Field(..., alias="fileName")
    file_url: str = Field(..., alias="fileUrl")

    @classmethod
    def build(cls, attachment: FileAttachmentEvent) -> "FileUploadPayload":
        return cls(
            channel=attachment.channel_id,
            thread_ts=attachment.thread_ts,
            file_name=attachment.file_name,
            file_url=attachment.download_url,
        )
