from datetime import datetime, timezone
from uuid import UUID

from audit.application.services import record_action
from audit.domain.entities import AuditAction
from auth.domain.entities import Subject
from documents.application.queries import load_document, readable_documents
from documents.domain.permissions import Action, ensure_can_perform
from shared.exceptions import NotFoundError, ValidationError
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from timeline.domain.entities import Activity, ActivityPage, TimelineEvent, TimelineEventType

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


async def append_event(
    uow: SqlAlchemyUnitOfWork,
    document_id: UUID,
    event_type: TimelineEventType,
    actor_id: str,
    version_id: UUID | None = None,
    notes: str | None = None,
) -> TimelineEvent:
    """
    Record an event inside the caller's transaction.

    Errors are never swallowed here: if the event cannot be written, the
    operation that triggered it must roll back with it.
    """
    event = TimelineEvent(
        document_id=document_id,
        version_id=version_id,
        event_type=TimelineEventType(event_type),
        actor_user_id=actor_id,
        notes=notes,
        occurred_at=datetime.now(timezone.utc),
    )
    return await uow.timeline.append(event)


async def list_events(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> list[TimelineEvent]:
    if offset < 0:
        raise ValidationError("offset must not be negative")
    limit = _clamp(limit)

    doc = await load_document(uow.documents, document_id)
    ensure_can_perform(subject, doc, Action.READ)
    return await uow.timeline.list_for_document(document_id, limit=limit, offset=offset)


async def record_manual_event(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    event_type: str,
    notes: str | None = None,
    version_id: UUID | None = None,
) -> TimelineEvent:
    try:
        event_type = TimelineEventType(event_type)
    except ValueError:
        raise ValidationError(f"Invalid event type: {event_type!r}") from None

    async with uow:
        doc = await load_document(uow.documents, document_id)
        ensure_can_perform(subject, doc, Action.WRITE)
        if version_id is not None and not await uow.versions.get_for_document(document_id, version_id):
            raise NotFoundError("Version", str(version_id))

        event = await append_event(
            uow,
            document_id,
            event_type,
            subject.id,
            version_id=version_id,
            notes=notes or f"{event_type.value} event",
        )
        await record_action(
            uow,
            subject.id,
            AuditAction.TIMELINE_EVENT,
            "DocumentTimeline",
            event.id,
            document_id=document_id,
            event_type=event_type.value,
            notes=notes,
        )
        await uow.commit()
    return event


async def list_activities(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> ActivityPage:
    """Recent timeline events across every document the subject may read, newest first."""
    if offset < 0:
        raise ValidationError("offset must not be negative")
    limit = _clamp(limit)

    documents = {doc.id: doc for doc in await readable_documents(uow.documents, subject)}
    events = await uow.timeline.list_for_documents(documents.keys(), limit=limit, offset=offset)
    total = await uow.timeline.count_for_documents(documents.keys())
    activities = [
        Activity(
            event=event,
            document_title=documents[event.document_id].title,
            document_status=documents[event.document_id].status.value,
        )
        for event in events
    ]
    return ActivityPage(activities=activities, total=total, limit=limit, offset=offset)


def _clamp(limit: int) -> int:
    return max(1, min(limit, MAX_PAGE_SIZE))
