from datetime import datetime
from typing import Any

from pydantic import BaseModel

from audit.domain.entities import AuditAction, AuditLogPage


class AuditEntryResponse(BaseModel):
    id: int
    actor_user_id: str
    action: AuditAction
    resource_type: str
    resource_id: str
    meta: dict[str, Any] = {}
    at: datetime | None = None


class AuditLogPageResponse(BaseModel):
    logs: list[AuditEntryResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: AuditLogPage) -> "AuditLogPageResponse":
        return cls(
            logs=[AuditEntryResponse(**vars(entry)) for entry in page.entries],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )
