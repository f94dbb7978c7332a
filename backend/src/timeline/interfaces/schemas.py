from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from timeline.domain.entities import ActivityPage, TimelineEventType


class RecordEventRequest(BaseModel):
    event_type: str
    notes: str | None = None
    version_id: UUID | None = None


class TimelineEventResponse(BaseModel):
    id: int
    document_id: UUID
    version_id: UUID | None = None
    event_type: TimelineEventType
    actor_user_id: str
    notes: str | None = None
    occurred_at: datetime | None = None


class ActivityResponse(TimelineEventResponse):
    document_title: str
    document_status: str


class ActivityPageResponse(BaseModel):
    activities: list[ActivityResponse]
    total: int
    limit: int
    offset: int

    @classmethod
    def from_page(cls, page: ActivityPage) -> "ActivityPageResponse":
        return cls(
            activities=[
                ActivityResponse(
                    **vars(activity.event),
                    document_title=activity.document_title,
                    document_status=activity.document_status,
                )
                for activity in page.activities
            ],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
        )
