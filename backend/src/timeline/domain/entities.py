from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class TimelineEventType(StrEnum):
    CREATED = "CREATED"
    UPLOADED = "UPLOADED"
    REVIEW_REQUESTED = "REVIEW_REQUESTED"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
    EXPIRED = "EXPIRED"
    REPLACED = "REPLACED"
    STATUS_CHANGED = "STATUS_CHANGED"


@dataclass(frozen=True)
class TimelineEvent:
    document_id: UUID
    event_type: TimelineEventType
    actor_user_id: str
    version_id: UUID | None = None
    notes: str | None = None
    occurred_at: datetime | None = None
    id: int | None = field(default=None)


@dataclass(frozen=True)
class Activity:
    """A timeline event together with the document it belongs to."""

    event: TimelineEvent
    document_title: str
    document_status: str


@dataclass(frozen=True)
class ActivityPage:
    activities: list[Activity]
    total: int
    limit: int
    offset: int
