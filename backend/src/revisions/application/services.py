import asyncio
import logging
import os
from collections.abc import Sequence
from uuid import UUID

from audit.application.services import record_action
from audit.domain.entities import AuditAction
from auth.domain.entities import Subject
from documents.application.queries import load_document
from documents.domain.permissions import Action, can_file_revision, ensure_can_perform
from revisions.domain.entities import (
    ALLOWED_IMAGE_TYPES,
    MAX_ATTACHMENTS,
    AttachmentUpload,
    RevisionAttachment,
    RevisionRequest,
    RevisionStatus,
)
from revisions.infrastructure.image_normalizer import NORMALIZED_EXTENSION, normalize_image
from shared.config import settings
from shared.exceptions import (
    AuthorizationError,
    InvalidStatusError,
    NotFoundError,
    ValidationError,
)
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from storage.application.services import put_blob, release_blobs
from storage.domain.blob_store import BlobStore
from timeline.application.services import append_event
from timeline.domain.entities import TimelineEventType

logger = logging.getLogger(__name__)


async def file_revision_request(
    uow: SqlAlchemyUnitOfWork,
    blob_store: BlobStore,
    subject: Subject,
    document_id: UUID,
    version_id: UUID,
    notes: str,
    title: str | None = None,
    requirements: str | None = None,
    attachments: Sequence[AttachmentUpload] = (),
) -> RevisionRequest:
    """
    Open a revision request against one version of a document.

    Attachments are images only. Each one is re-encoded to JPEG before it is
    stored, and the recorded size and dimensions describe the stored file.
    """
    notes = (notes or "").strip()
    title = (title or "").strip() or None
    if not notes:
        raise ValidationError("Revision notes are required")
    if len(attachments) > MAX_ATTACHMENTS:
        raise ValidationError(f"At most {MAX_ATTACHMENTS} attachments are allowed")
    for upload in attachments:
        if upload.mime not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(f"Unsupported attachment type: {upload.mime}")

    doc = await load_document(uow.documents, document_id)
    if not await uow.versions.get_for_document(document_id, version_id):
        raise NotFoundError("Version", str(version_id))
    if not can_file_revision(subject, doc):
        raise AuthorizationError("Not allowed to request revisions on this document")

    normalized = [
        await asyncio.to_thread(normalize_image, upload.data, settings.ATTACHMENT_JPEG_QUALITY)
        for upload in attachments
    ]

    stored: list[RevisionAttachment] = []
    try:
        for upload, image in zip(attachments, normalized):
            blob_ref = await put_blob(blob_store, image.data, content_type=image.mime)
            stored.append(
                RevisionAttachment(
                    blob_ref=blob_ref,
                    file_name=_jpeg_name(upload.file_name),
                    mime=image.mime,
                    size=image.size,
                    width=image.width,
                    height=image.height,
                )
            )

        async with uow:
            request = await uow.revisions.create(
                RevisionRequest(
                    document_id=document_id,
                    version_id=version_id,
                    requester_user_id=subject.id,
                    title=title,
                    notes=notes,
                    requirements=requirements,
                    status=RevisionStatus.PROGRESS,
                    attachments=stored,
                )
            )
            await append_event(
                uow,
                document_id,
                TimelineEventType.REVIEW_REQUESTED,
                subject.id,
                version_id=version_id,
                notes=f"Revision requested: {title}" if title else "Revision requested",
            )
            await record_action(
                uow,
                subject.id,
                AuditAction.REVISION_REQUEST,
                "RevisionRequest",
                request.id,
                document_id=document_id,
                version_id=version_id,
                attachments=len(stored),
            )
            await uow.commit()
    except BaseException:  # cancellation included
        await release_blobs(blob_store, [a.blob_ref for a in stored])
        raise

    logger.info(
        "Revision request %s filed on version %s by %s with %d attachment(s)",
        request.id,
        version_id,
        subject.id,
        len(stored),
    )
    return request


async def update_revision_status(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    version_id: UUID,
    request_id: UUID,
    new_status: str,
) -> RevisionRequest:
    """Any status may follow any other. The change is audited but not put on the timeline."""
    try:
        status = RevisionStatus(str(new_status).strip().upper())
    except ValueError:
        raise InvalidStatusError(new_status) from None

    async with uow:
        doc = await load_document(uow.documents, document_id)
        ensure_can_perform(subject, doc, Action.REVIEW)
        request = await uow.revisions.get_by_id(request_id)
        if not request or request.version_id != version_id or request.document_id != document_id:
            raise NotFoundError("Revision request", str(request_id))
        if request.status == status:
            return request

        updated = await uow.revisions.update_status(request_id, status)
        await record_action(
            uow,
            subject.id,
            AuditAction.REVISION_STATUS,
            "RevisionRequest",
            request_id,
            document_id=document_id,
            previous_status=request.status.value,
            status=status.value,
        )
        await uow.commit()

    logger.info("Revision request %s moved %s -> %s by %s", request_id, request.status, status, subject.id)
    return updated


async def list_revision_requests(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    version_id: UUID,
) -> list[RevisionRequest]:
    doc = await load_document(uow.documents, document_id)
    ensure_can_perform(subject, doc, Action.READ)
    if not await uow.versions.get_for_document(document_id, version_id):
        raise NotFoundError("Version", str(version_id))
    return await uow.revisions.list_for_version(version_id)


def _jpeg_name(file_name: str | None) -> str:
    base = os.path.splitext(os.path.basename(file_name or ""))[0] or "attachment"
    return f"{base}{NORMALIZED_EXTENSION}"
