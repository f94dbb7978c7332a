from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from comments.domain.entities import Comment
from comments.infrastructure.models import CommentModel


class DbCommentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, comment: Comment) -> Comment:
        model = CommentModel(
            document_id=comment.document_id,
            version_id=comment.version_id,
            author_user_id=comment.author_user_id,
            content=comment.content,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return _to_entity(model)

    async def list_for_document(self, document_id: UUID) -> list[Comment]:
        result = await self.session.execute(
            select(CommentModel)
            .where(CommentModel.document_id == document_id)
            .order_by(CommentModel.created_at.desc())
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def detach_version(self, version_id: UUID) -> None:
        await self.session.execute(
            update(CommentModel)
            .where(CommentModel.version_id == version_id)
            .values(version_id=None)
        )


def _to_entity(model: CommentModel) -> Comment:
    return Comment(
        id=model.id,
        document_id=model.document_id,
        version_id=model.version_id,
        author_user_id=model.author_user_id,
        content=model.content,
        created_at=model.created_at,
    )
