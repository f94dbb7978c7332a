from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any


class AuditAction(StrEnum):
    DOC_CREATE = "DOC_CREATE"
    DOC_READ = "DOC_READ"
    DOC_UPDATE = "DOC_UPDATE"
    DOC_UPLOAD = "DOC_UPLOAD"
    DOC_DOWNLOAD = "DOC_DOWNLOAD"
    VERSION_DELETE = "VERSION_DELETE"
    VERSION_SET_CURRENT = "VERSION_SET_CURRENT"
    REVISION_REQUEST = "REVISION_REQUEST"
    REVISION_STATUS = "REVISION_STATUS"
    TIMELINE_EVENT = "TIMELINE_EVENT"
    COMMENT_ADD = "COMMENT_ADD"


@dataclass(frozen=True)
class AuditEntry:
    """Who did what to which resource. Entries are never changed once written."""

    actor_user_id: str
    action: AuditAction
    resource_type: str
    resource_id: str
    meta: dict[str, Any] = field(default_factory=dict)
    at: datetime | None = None
    id: int | None = field(default=None)


@dataclass(frozen=True)
class AuditLogPage:
    entries: list[AuditEntry]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit) if self.limit else 0
