from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime

from src.auth.session import Session
from src.models.entities import StudentProfile, UploadedDocument, to_iso_timestamp
from src.repository.collections import new_entity_id

# Advisory only: oversized uploads are logged, never rejected.
ADVISORY_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_MIME_TYPE = "application/octet-stream"
_DOCUMENT_UPLOADED = ("Success", "Document uploaded successfully")
_DOCUMENT_DELETED = ("Success", "Document deleted successfully")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Attachment:
    """A file picked in the view layer, before it is inlined into a record."""

    name: str
    payload: bytes
    mime_type: str | None = None


def guess_mime_type(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_MIME_TYPE


def encode_document(
    name: str,
    payload: bytes,
    mime_type: str | None = None,
    *,
    uploaded_at: datetime | None = None,
) -> UploadedDocument:
    resolved_type = mime_type or guess_mime_type(name)
    if len(payload) > ADVISORY_MAX_BYTES:
        logger.warning(
            "Document %s is %d bytes (advisory limit %d); storing inline anyway.",
            name,
            len(payload),
            ADVISORY_MAX_BYTES,
        )
    encoded = base64.b64encode(payload).decode("ascii")
    return UploadedDocument(
        id=new_entity_id(),
        name=name,
        mime_type=resolved_type,
        base64_data=f"data:{resolved_type};base64,{encoded}",
        uploaded_at=to_iso_timestamp(uploaded_at),
    )


def encode_attachments(attachments: list[Attachment]) -> list[UploadedDocument]:
    return [
        encode_document(item.name, item.payload, item.mime_type)
        for item in attachments
    ]


def decode_document(document: UploadedDocument) -> bytes:
    data = document.base64_data
    if data.startswith("data:"):
        _, _, data = data.partition(",")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"Document {document.id} does not hold valid base64 data.") from exc


def add_profile_document(session: Session, name: str, attachment: Attachment | None) -> bool:
    user = session.user
    if user is None or not isinstance(user.profile, StudentProfile):
        session.notifier.error("Error", "Only students can upload profile documents.")
        return False
    if not name or attachment is None:
        session.notifier.error("Error", "Please provide both name and file")
        return False

    document = encode_document(name, attachment.payload, attachment.mime_type or guess_mime_type(attachment.name))
    documents = [*user.profile.documents, document]
    return session.update_profile({"documents": documents}, success=_DOCUMENT_UPLOADED)


def remove_profile_document(session: Session, document_id: str) -> bool:
    user = session.user
    if user is None or not isinstance(user.profile, StudentProfile):
        session.notifier.error("Error", "Only students can manage profile documents.")
        return False
    documents = [item for item in user.profile.documents if item.id != document_id]
    return session.update_profile({"documents": documents}, success=_DOCUMENT_DELETED)
