import hashlib
import logging
from contextlib import nullcontext
from uuid import UUID

from audit.application.services import record_action
from audit.domain.entities import AuditAction
from auth.domain.entities import Subject
from documents.application.queries import load_document
from documents.domain.permissions import Action, ensure_can_perform, is_admin
from shared.config import settings
from shared.exceptions import (
    AuthorizationError,
    ConflictError,
    CurrentVersionProtectedError,
    NotFoundError,
    ValidationError,
    VersionLabelConflictError,
)
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from storage.application.services import put_blob, release_blobs
from storage.domain.blob_store import BlobStore
from timeline.application.services import append_event
from timeline.domain.entities import TimelineEventType
from versions.domain.entities import ChangeType, DocumentVersion
from versions.domain.labels import next_label
from versions.domain.lock import VersionLock

logger = logging.getLogger(__name__)

ALLOWED_DOCUMENT_MIME_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)


async def create_version(
    uow: SqlAlchemyUnitOfWork,
    blob_store: BlobStore,
    subject: Subject,
    document_id: UUID,
    file_bytes: bytes,
    change_type: ChangeType | str = ChangeType.MAJOR,
    change_log: str | None = "File uploaded",
    file_name: str | None = None,
    mime_type: str | None = None,
    lock: VersionLock | None = None,
) -> DocumentVersion:
    """
    Upload a new immutable version and make it the document's current one.

    The blob is stored first, then the version row, the current pointer and
    the UPLOADED event are written in one transaction. Concurrent uploads to
    the same document are serialized by the document row lock (PostgreSQL),
    the unique ``(document_id, version_label)`` constraint and the document
    ``row_version`` check; a detected collision recomputes the label a bounded
    number of times. If anything fails after the blob was stored, the blob is
    released again.
    """
    try:
        change_type = ChangeType(change_type)
    except ValueError:
        raise ValidationError(f"Invalid change type: {change_type!r}") from None
    if not file_bytes:
        raise ValidationError("Uploaded file is empty")
    if len(file_bytes) > settings.MAX_UPLOAD_BYTES:
        raise ValidationError(f"File exceeds the {settings.MAX_UPLOAD_BYTES} byte limit")
    if mime_type is not None and mime_type not in ALLOWED_DOCUMENT_MIME_TYPES:
        raise ValidationError(f"Unsupported file type: {mime_type}")

    # Checked up front so unauthorized callers never reach the blob store.
    doc = await load_document(uow.documents, document_id)
    ensure_can_perform(subject, doc, Action.WRITE)

    content_hash = hashlib.sha256(file_bytes).hexdigest()
    blob_ref = await put_blob(blob_store, file_bytes, content_type=mime_type)

    attempts = max(1, settings.VERSION_LABEL_RETRIES)
    try:
        async with lock.hold(document_id) if lock else nullcontext():
            for attempt in range(1, attempts + 1):
                try:
                    version = await _append_version(
                        uow,
                        subject,
                        document_id,
                        DocumentVersion(
                            document_id=document_id,
                            version_label="",
                            change_type=change_type,
                            change_log=change_log or "File uploaded",
                            content_hash=content_hash,
                            blob_ref=blob_ref,
                            file_name=file_name,
                            file_mime=mime_type,
                            file_size=len(file_bytes),
                            created_by=subject.id,
                        ),
                    )
                    break
                except VersionLabelConflictError:
                    raise
                except ConflictError:
                    if attempt == attempts:
                        raise VersionLabelConflictError(document_id) from None
                    logger.warning(
                        "Version label collision on document %s (attempt %d of %d), retrying",
                        document_id,
                        attempt,
                        attempts,
                    )
    except BaseException:  # cancellation included
        await release_blobs(blob_store, [blob_ref])
        raise

    logger.info(
        "Version %s (%s) uploaded to document %s by %s",
        version.id,
        version.version_label,
        document_id,
        subject.id,
    )
    return version


async def _append_version(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    draft: DocumentVersion,
) -> DocumentVersion:
    async with uow:
        doc = await load_document(uow.documents, document_id, for_update=True)
        ensure_can_perform(subject, doc, Action.WRITE)

        draft.version_label = next_label(doc.last_version_label, draft.change_type)
        version = await uow.versions.create(draft)

        doc.current_version_id = version.id
        doc.last_version_label = version.version_label
        await uow.documents.update(doc, doc.row_version)
        await append_event(
            uow,
            document_id,
            TimelineEventType.UPLOADED,
            subject.id,
            version_id=version.id,
            notes=f"New version uploaded: {version.version_label}",
        )
        await record_action(
            uow,
            subject.id,
            AuditAction.DOC_UPLOAD,
            "DocumentVersion",
            version.id,
            document_id=document_id,
            version=version.version_label,
            file_name=version.file_name,
            file_size=version.file_size,
        )
        await uow.commit()
    return version


async def delete_version(
    uow: SqlAlchemyUnitOfWork,
    blob_store: BlobStore,
    subject: Subject,
    document_id: UUID,
    version_id: UUID,
) -> None:
    """
    Remove a historical version together with its revision requests.

    The current version can never be deleted, whoever asks; the pointer has to
    be moved with set_current_version first. Blobs are released after the
    metadata is committed, and a failed release is only logged.
    """
    async with uow:
        doc = await load_document(uow.documents, document_id, for_update=True)
        version = await uow.versions.get_for_document(document_id, version_id)
        if not version:
            raise NotFoundError("Version", str(version_id))
        if doc.current_version_id == version.id:
            raise CurrentVersionProtectedError(version.id)
        if not is_admin(subject):
            raise AuthorizationError("Only administrators can delete versions")

        attachment_refs = await uow.revisions.delete_for_version(version.id)
        await uow.comments.detach_version(version.id)
        await uow.versions.delete(version.id)
        await record_action(
            uow,
            subject.id,
            AuditAction.VERSION_DELETE,
            "DocumentVersion",
            version.id,
            document_id=document_id,
            version=version.version_label,
        )
        await uow.commit()

    released = await release_blobs(blob_store, [version.blob_ref, *attachment_refs])
    logger.info(
        "Version %s (%s) of document %s deleted by %s, %d blob(s) released",
        version.id,
        version.version_label,
        document_id,
        subject.id,
        released,
    )


async def set_current_version(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    version_id: UUID,
) -> DocumentVersion:
    async with uow:
        doc = await load_document(uow.documents, document_id, for_update=True)
        ensure_can_perform(subject, doc, Action.WRITE)
        version = await uow.versions.get_for_document(document_id, version_id)
        if not version:
            raise NotFoundError("Version", str(version_id))
        if doc.current_version_id == version.id:
            return version

        doc.current_version_id = version.id
        await uow.documents.update(doc, doc.row_version)
        await append_event(
            uow,
            document_id,
            TimelineEventType.REPLACED,
            subject.id,
            version_id=version.id,
            notes=f"Current version set to {version.version_label}",
        )
        await record_action(
            uow,
            subject.id,
            AuditAction.VERSION_SET_CURRENT,
            "DocumentVersion",
            version.id,
            document_id=document_id,
            version=version.version_label,
        )
        await uow.commit()

    logger.info("Document %s now points at version %s", document_id, version.version_label)
    return version


async def list_versions(
    uow: SqlAlchemyUnitOfWork, subject: Subject, document_id: UUID
) -> list[DocumentVersion]:
    doc = await load_document(uow.documents, document_id)
    ensure_can_perform(subject, doc, Action.READ)
    return await uow.versions.list_for_document(document_id)


async def get_version(
    uow: SqlAlchemyUnitOfWork, subject: Subject, document_id: UUID, version_id: UUID
) -> DocumentVersion:
    doc = await load_document(uow.documents, document_id)
    ensure_can_perform(subject, doc, Action.READ)
    version = await uow.versions.get_for_document(document_id, version_id)
    if not version:
        raise NotFoundError("Version", str(version_id))
    return version


async def get_download(
    uow: SqlAlchemyUnitOfWork,
    blob_store: BlobStore,
    subject: Subject,
    document_id: UUID,
    version_id: UUID | None = None,
) -> tuple[DocumentVersion, str]:
    """Resolve a version (the current one by default) to a download URL, auditing the access."""
    async with uow:
        doc = await load_document(uow.documents, document_id)
        ensure_can_perform(subject, doc, Action.DOWNLOAD)

        version_id = version_id or doc.current_version_id
        if version_id is None:
            raise NotFoundError("Version", "document has no uploaded file")
        version = await uow.versions.get_for_document(document_id, version_id)
        if not version:
            raise NotFoundError("Version", str(version_id))
        await record_action(
            uow,
            subject.id,
            AuditAction.DOC_DOWNLOAD,
            "DocumentVersion",
            version.id,
            document_id=document_id,
            version=version.version_label,
            file_name=version.file_name,
            file_size=version.file_size,
        )
        await uow.commit()
    return version, blob_store.url_for(version.blob_ref)
