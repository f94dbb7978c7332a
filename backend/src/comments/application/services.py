from uuid import UUID

from audit.application.services import record_action
from audit.domain.entities import AuditAction
from auth.domain.entities import Subject
from comments.domain.entities import Comment
from documents.application.queries import load_document
from documents.domain.permissions import Action, ensure_can_perform
from shared.exceptions import ValidationError
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork


async def add_comment(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    document_id: UUID,
    content: str,
    version_id: UUID | None = None,
) -> Comment:
    content = (content or "").strip()
    if not content:
        raise ValidationError("Comment content is required")

    async with uow:
        doc = await load_document(uow.documents, document_id)
        ensure_can_perform(subject, doc, Action.COMMENT)
        if version_id is not None and not await uow.versions.get_for_document(document_id, version_id):
            raise ValidationError("Version does not belong to this document")

        comment = await uow.comments.create(
            Comment(
                document_id=document_id,
                version_id=version_id,
                author_user_id=subject.id,
                content=content,
            )
        )
        await record_action(
            uow,
            subject.id,
            AuditAction.COMMENT_ADD,
            "Comment",
            comment.id,
            document_id=document_id,
            version_id=version_id,
            content_length=len(content),
        )
        await uow.commit()
    return comment


async def list_comments(uow: SqlAlchemyUnitOfWork, subject: Subject, document_id: UUID) -> list[Comment]:
    doc = await load_document(uow.documents, document_id)
    ensure_can_perform(subject, doc, Action.READ)
    return await uow.comments.list_for_document(document_id)
