from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID


class ChangeType(StrEnum):
    MAJOR = "MAJOR"
    MINOR = "MINOR"


@dataclass
class DocumentVersion:
    document_id: UUID
    version_label: str
    change_type: ChangeType
    content_hash: str
    blob_ref: str
    created_by: str
    file_size: int
    change_log: str = "File uploaded"
    file_name: str | None = None
    file_mime: str | None = None
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
