from uuid import UUID

from fastapi import APIRouter, Depends

from auth.domain.entities import Subject
from comments.application.services import add_comment, list_comments
from comments.interfaces.schemas import CommentResponse, CreateCommentRequest
from shared.dependencies import get_current_subject, get_uow
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork

router = APIRouter(prefix="/api/documents/{document_id}/comments", tags=["comments"])


@router.post("", response_model=CommentResponse, status_code=201)
async def create(
    document_id: UUID,
    body: CreateCommentRequest,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await add_comment(uow, subject, document_id, body.content, version_id=body.version_id)


@router.get("", response_model=list[CommentResponse])
async def list_all(
    document_id: UUID,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return await list_comments(uow, subject, document_id)
