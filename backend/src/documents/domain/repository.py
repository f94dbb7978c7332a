from typing import Protocol
from uuid import UUID

from documents.domain.entities import Document, DocumentStatus, Visibility


class DocumentRepository(Protocol):
    async def get_by_id(self, document_id: UUID, *, for_update: bool = False) -> Document | None: ...

    async def list_filtered(
        self,
        *,
        status: DocumentStatus | None = None,
        visibility: Visibility | None = None,
        search: str | None = None,
        viewer_id: str | None = None,
        viewer_unit_ids: frozenset[str] = frozenset(),
        tag: str | None = None,
    ) -> list[Document]: ...

    async def create(self, document: Document) -> Document: ...

    async def update(self, document: Document, expected_row_version: int) -> Document: ...
