from uuid import UUID

from fastapi import APIRouter, Depends

from auth.domain.entities import Subject
from shared.dependencies import get_current_subject, get_uow
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from timeline.application.services import (
    DEFAULT_PAGE_SIZE,
    list_activities,
    list_events,
    record_manual_event,
)
from timeline.interfaces.schemas import (
    ActivityPageResponse,
    RecordEventRequest,
    TimelineEventResponse,
)

router = APIRouter(prefix="/api/documents/{document_id}/timeline", tags=["timeline"])
activity_router = APIRouter(prefix="/api/activities", tags=["timeline"])


@router.get("", response_model=list[TimelineEventResponse])
async def list_all(
    document_id: UUID,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await list_events(uow, subject, document_id, limit=limit, offset=offset)


@router.post("", response_model=TimelineEventResponse, status_code=201)
async def record(
    document_id: UUID,
    body: RecordEventRequest,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await record_manual_event(
        uow,
        subject,
        document_id,
        body.event_type.strip().upper(),
        notes=body.notes,
        version_id=body.version_id,
    )


@activity_router.get("", response_model=ActivityPageResponse)
async def list_recent(
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return ActivityPageResponse.from_page(
        await list_activities(uow, subject, limit=limit, offset=offset)
    )
