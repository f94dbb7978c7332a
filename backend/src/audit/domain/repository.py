from datetime import datetime
from typing import Protocol

from audit.domain.entities import AuditEntry


class AuditLogRepository(Protocol):
    async def append(self, entry: AuditEntry) -> AuditEntry: ...

    async def search(
        self,
        *,
        limit: int,
        offset: int,
        text: str | None = None,
        action: str | None = None,
        resource_type: str | None = None,
        actor_user_id: str | None = None,
        since: datetime | None = None,
        before: datetime | None = None,
    ) -> tuple[list[AuditEntry], int]: ...
