import logging
from collections.abc import Iterable
from datetime import date
from uuid import UUID

from audit.application.services import record_action
from audit.domain.entities import AuditAction
from auth.domain.entities import Subject
from documents.application.queries import load_document, readable_documents
from documents.domain.entities import Classification, Document, DocumentStatus, Visibility
from documents.domain.permissions import Action, can_create_documents, ensure_can_perform
from shared.exceptions import AuthorizationError, ConflictError, InvalidStatusError, ValidationError
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from timeline.application.services import append_event
from timeline.domain.entities import TimelineEventType

logger = logging.getLogger(__name__)

# Statuses without a dedicated event type are recorded as STATUS_CHANGED.
STATUS_EVENT_TYPES = {
    DocumentStatus.IN_REVIEW: TimelineEventType.REVIEW_REQUESTED,
    DocumentStatus.APPROVED: TimelineEventType.APPROVED,
    DocumentStatus.PUBLISHED: TimelineEventType.PUBLISHED,
    DocumentStatus.ARCHIVED: TimelineEventType.ARCHIVED,
}

MAX_TAG_LENGTH = 100

_UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "summary",
        "category",
        "visibility",
        "classification",
        "effective_date",
        "expiry_date",
        "tags",
    }
)


async def create_document(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    title: str,
    unit_id: str,
    summary: str | None = None,
    category: str | None = None,
    visibility: Visibility | str = Visibility.INTERNAL,
    classification: Classification | str = Classification.LOW,
    effective_date: date | None = None,
    expiry_date: date | None = None,
    tags: Iterable[str] | None = None,
) -> Document:
    if not can_create_documents(subject):
        raise AuthorizationError("Creating documents requires DOC_CREATE")

    title = (title or "").strip()
    unit_id = (unit_id or "").strip()
    if not title or not unit_id:
        raise ValidationError("Title and unit are required")

    doc = Document(
        title=title,
        owner_user_id=subject.id,
        unit_id=unit_id,
        summary=summary,
        category=category,
        visibility=_enum(Visibility, visibility, "visibility"),
        classification=_enum(Classification, classification, "classification"),
        status=DocumentStatus.DRAFT,
        effective_date=effective_date,
        expiry_date=expiry_date,
        tags=_clean_tags(tags),
    )

    async with uow:
        created = await uow.documents.create(doc)
        await append_event(
            uow, created.id, TimelineEventType.CREATED, subject.id, notes="Document created"
        )
        await record_action(
            uow, subject.id, AuditAction.DOC_CREATE, "Document", created.id, title=created.title
        )
        await uow.commit()

    logger.info("Document %s created by %s", created.id, subject.id)
    return created


async def get_document(uow: SqlAlchemyUnitOfWork, subject: Subject, document_id: UUID) -> Document:
    """Fetch one document; every successful view is written to the audit log."""
    async with uow:
        doc = await load_document(uow.documents, document_id)
        ensure_can_perform(subject, doc, Action.READ)
        await record_action(uow, subject.id, AuditAction.DOC_READ, "Document", doc.id, title=doc.title)
        await uow.commit()
    return doc


async def list_documents(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    status: DocumentStatus | str | None = None,
    visibility: Visibility | str | None = None,
    search: str | None = None,
    tag: str | None = None,
) -> list[Document]:
    """Documents the subject may read, optionally filtered."""
    if status is not None:
        status = _enum(DocumentStatus, status, "status")
    if visibility is not None:
        visibility = _enum(Visibility, visibility, "visibility")

    return await readable_documents(
        uow.documents,
        subject,
        status=status,
        visibility=visibility,
        search=search,
        tag=(tag or "").strip() or None,
    )


async def update_document(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    expected_row_version: int | None = None,
    **changes,
) -> Document:
    """Edit descriptive fields and tags. Status changes go through set_status."""
    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

    async with uow:
        doc = await load_document(uow.documents, document_id)
        ensure_can_perform(subject, doc, Action.WRITE)
        if expected_row_version is not None and expected_row_version != doc.row_version:
            raise ConflictError("Document was modified by another user")

        for name, value in changes.items():
            if name == "title":
                value = (value or "").strip()
                if not value:
                    raise ValidationError("Title is required")
            elif name == "visibility":
                value = _enum(Visibility, value, "visibility")
            elif name == "classification":
                value = _enum(Classification, value, "classification")
            elif name == "tags":
                value = _clean_tags(value)
            setattr(doc, name, value)

        updated = await uow.documents.update(doc, doc.row_version)
        await record_action(
            uow,
            subject.id,
            AuditAction.DOC_UPDATE,
            "Document",
            doc.id,
            title=updated.title,
            changes=sorted(changes),
        )
        await uow.commit()
    return updated


async def set_status(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    new_status: DocumentStatus | str,
) -> Document:
    """
    Move a document to any status.

    Transitions are unconstrained: any status may follow any
    other, as long as the actor may write the document. Setting the current
    status again is a no-op and records nothing.
    """
    try:
        new_status = DocumentStatus(new_status)
    except ValueError:
        raise InvalidStatusError(new_status) from None

    async with uow:
        doc = await load_document(uow.documents, document_id, for_update=True)
        ensure_can_perform(subject, doc, Action.WRITE)
        if doc.status == new_status:
            return doc

        old_status = doc.status
        doc.status = new_status
        updated = await uow.documents.update(doc, doc.row_version)
        await append_event(
            uow,
            doc.id,
            STATUS_EVENT_TYPES.get(new_status, TimelineEventType.STATUS_CHANGED),
            subject.id,
            notes=f"Status changed from {old_status} to {new_status}",
        )
        await record_action(
            uow,
            subject.id,
            AuditAction.DOC_UPDATE,
            "Document",
            doc.id,
            title=doc.title,
            changes=["status"],
            previous_status=old_status.value,
            status=new_status.value,
        )
        await uow.commit()

    logger.info("Document %s status %s -> %s by %s", doc.id, old_status, new_status, subject.id)
    return updated


def _clean_tags(tags: Iterable[str] | None) -> list[str]:
    """Trimmed, de-duplicated and sorted; blank names are dropped."""
    cleaned = {name.strip() for name in tags or () if name and name.strip()}
    too_long = [name for name in cleaned if len(name) > MAX_TAG_LENGTH]
    if too_long:
        raise ValidationError(f"Tag names are limited to {MAX_TAG_LENGTH} characters")
    return sorted(cleaned)


def _enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}") from None
