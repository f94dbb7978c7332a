from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class CreateCommentRequest(BaseModel):
    content: str
    version_id: UUID | None = None


class CommentResponse(BaseModel):
    id: UUID
    document_id: UUID
    version_id: UUID | None = None
    author_user_id: str
    content: str
    created_at: datetime | None = None
