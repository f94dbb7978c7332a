from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass
class Comment:
    document_id: UUID
    author_user_id: str
    content: str
    version_id: UUID | None = None
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
