from typing import Protocol
from uuid import UUID

from comments.domain.entities import Comment


class CommentRepository(Protocol):
    async def create(self, comment: Comment) -> Comment: ...

    async def list_for_document(self, document_id: UUID) -> list[Comment]: ...

    async def detach_version(self, version_id: UUID) -> None: ...
