from collections.abc import Collection
from typing import Protocol
from uuid import UUID

from timeline.domain.entities import TimelineEvent


class TimelineRepository(Protocol):
    async def append(self, event: TimelineEvent) -> TimelineEvent: ...

    async def list_for_document(self, document_id: UUID, limit: int, offset: int) -> list[TimelineEvent]: ...

    async def list_for_documents(
        self, document_ids: Collection[UUID], limit: int, offset: int
    ) -> list[TimelineEvent]: ...

    async def count_for_documents(self, document_ids: Collection[UUID]) -> int: ...
