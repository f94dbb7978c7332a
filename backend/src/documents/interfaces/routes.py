from uuid import UUID

from fastapi import APIRouter, Depends

from auth.domain.entities import Subject
from documents.application.services import (
    create_document,
    get_document,
    list_documents,
    set_status,
    update_document,
)
from documents.domain.entities import DocumentStatus, Visibility
from documents.interfaces.schemas import (
    CreateDocumentRequest,
    DocumentResponse,
    SetStatusRequest,
    UpdateDocumentRequest,
)
from shared.dependencies import get_current_subject, get_uow
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork

router = APIRouter(prefix="/api/documents", tags=["documents"])


@router.post("/", response_model=DocumentResponse, status_code=201)
async def create(
    body: CreateDocumentRequest,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await create_document(uow, subject, **body.model_dump())


@router.get("/", response_model=list[DocumentResponse])
async def list_all(
    status: DocumentStatus | None = None,
    visibility: Visibility | None = None,
    q: str | None = None,
    tag: str | None = None,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await list_documents(uow, subject, status=status, visibility=visibility, search=q, tag=tag)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_one(
    document_id: UUID,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await get_document(uow, subject, document_id)


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update(
    document_id: UUID,
    body: UpdateDocumentRequest,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    changes = body.model_dump(exclude_unset=True)
    expected_row_version = changes.pop("expected_row_version", None)
    return await update_document(
        uow, subject, document_id, expected_row_version=expected_row_version, **changes
    )


@router.post("/{document_id}/status", response_model=DocumentResponse)
async def change_status(
    document_id: UUID,
    body: SetStatusRequest,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await set_status(uow, subject, document_id, body.status.strip().upper())
