from typing import Protocol
from uuid import UUID

from revisions.domain.entities import RevisionRequest, RevisionStatus


class RevisionRequestRepository(Protocol):
    async def get_by_id(self, request_id: UUID) -> RevisionRequest | None: ...

    async def list_for_version(self, version_id: UUID) -> list[RevisionRequest]: ...

    async def create(self, request: RevisionRequest) -> RevisionRequest: ...

    async def update_status(self, request_id: UUID, status: RevisionStatus) -> RevisionRequest: ...

    async def delete_for_version(self, version_id: UUID) -> list[str]:
        """Delete every request of a version and return the attachment blob refs."""
        ...
