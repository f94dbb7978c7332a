from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile

from auth.domain.entities import Subject
from revisions.application.services import (
    file_revision_request,
    list_revision_requests,
    update_revision_status,
)
from revisions.domain.entities import AttachmentUpload
from revisions.interfaces.schemas import RevisionRequestResponse, UpdateRevisionStatusRequest
from shared.dependencies import get_blob_store, get_current_subject, get_uow
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from storage.domain.blob_store import BlobStore

router = APIRouter(
    prefix="/api/documents/{document_id}/versions/{version_id}/revision-requests",
    tags=["revisions"],
)


@router.post("", response_model=RevisionRequestResponse, status_code=201)
async def file_request(
    document_id: UUID,
    version_id: UUID,
    notes: str = Form(""),
    title: str | None = Form(None),
    requirements: str | None = Form(None),
    attachments: list[UploadFile] | None = File(None),
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
    blob_store: BlobStore = Depends(get_blob_store),
):
    uploads = [
        AttachmentUpload(
            file_name=f.filename or "attachment",
            mime=f.content_type or "",
            data=await f.read(),
        )
        for f in attachments or []
    ]
    request = await file_revision_request(
        uow,
        blob_store,
        subject,
        document_id,
        version_id,
        notes,
        title=title,
        requirements=requirements,
        attachments=uploads,
    )
    return RevisionRequestResponse.from_request(request, blob_store)


@router.get("", response_model=list[RevisionRequestResponse])
async def list_all(
    document_id: UUID,
    version_id: UUID,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
    blob_store: BlobStore = Depends(get_blob_store),
):
    requests = await list_revision_requests(uow, subject, document_id, version_id)
    return [RevisionRequestResponse.from_request(r, blob_store) for r in requests]


@router.patch("/{request_id}", response_model=RevisionRequestResponse)
async def change_status(
    document_id: UUID,
    version_id: UUID,
    request_id: UUID,
    body: UpdateRevisionStatusRequest,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
    blob_store: BlobStore = Depends(get_blob_store),
):
    request = await update_revision_status(
        uow, subject, document_id, version_id, request_id, body.status
    )
    return RevisionRequestResponse.from_request(request, blob_store)
