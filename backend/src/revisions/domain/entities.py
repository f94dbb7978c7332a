from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

MAX_ATTACHMENTS = 5

ALLOWED_IMAGE_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/avif",
        "image/heic",
        "image/heif",
    }
)


class RevisionStatus(StrEnum):
    PROGRESS = "PROGRESS"
    DONE = "DONE"
    POSTPONE = "POSTPONE"
    DENIED = "DENIED"


@dataclass
class RevisionAttachment:
    blob_ref: str
    file_name: str
    mime: str
    size: int
    width: int | None = None
    height: int | None = None
    revision_request_id: UUID | None = None
    id: UUID | None = field(default=None)


@dataclass
class RevisionRequest:
    document_id: UUID
    version_id: UUID
    requester_user_id: str
    notes: str
    title: str | None = None
    requirements: str | None = None
    status: RevisionStatus = RevisionStatus.PROGRESS
    attachments: list[RevisionAttachment] = field(default_factory=list)
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)


@dataclass(frozen=True)
class AttachmentUpload:
    """An image as received from the caller, before normalization."""

    file_name: str
    mime: str
    data: bytes
