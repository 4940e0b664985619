"""Legal request intake: modal, submission parsing, notifications and file relay."""

from .attachments import first_shared_file, relay_file_share
from .messages import build_file_confirmation, build_summary_message, build_thread_confirmation
from .modal import build_request_modal
from .models import (
    NOT_PROVIDED,
    NOT_SELECTED,
    FieldIds,
    FileAttachmentEvent,
    FileUploadPayload,
    FormLayout,
    LegalRequest,
    NewRequestPayload,
    RequestFields,
    RequestType,
    ThreadReference,
)
from .notifications import process_submission, publish_summary
from .requests import parse_private_metadata, parse_submission, resolve_destination_channel

__all__ = [
    "NOT_PROVIDED",
    "NOT_SELECTED",
    "FieldIds",
    "FileAttachmentEvent",
    "FileUploadPayload",
    "FormLayout",
    "LegalRequest",
    "NewRequestPayload",
    "RequestFields",
    "RequestType",
    "ThreadReference",
    "build_file_confirmation",
    "build_request_modal",
    "build_summary_message",
    "build_thread_confirmation",
    "first_shared_file",
    "parse_private_metadata",
    "parse_submission",
    "process_submission",
    "publish_summary",
    "relay_file_share",
    "resolve_destination_channel",
]
