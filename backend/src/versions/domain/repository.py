from typing import Protocol
from uuid import UUID

from versions.domain.entities import DocumentVersion


class VersionRepository(Protocol):
    async def get_for_document(self, document_id: UUID, version_id: UUID) -> DocumentVersion | None: ...

    async def list_for_document(self, document_id: UUID) -> list[DocumentVersion]: ...

    async def create(self, version: DocumentVersion) -> DocumentVersion: ...

    async def delete(self, version_id: UUID) -> None: ...
