from collections.abc import Collection
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from timeline.domain.entities import TimelineEvent, TimelineEventType
from timeline.infrastructure.models import TimelineEventModel


class DbTimelineRepository:
    """Append-only: events are never updated or deleted."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, event: TimelineEvent) -> TimelineEvent:
        model = TimelineEventModel(
            document_id=event.document_id,
            version_id=event.version_id,
            event_type=event.event_type.value,
            actor_user_id=event.actor_user_id,
            notes=event.notes,
            occurred_at=event.occurred_at,
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

    async def list_for_document(self, document_id: UUID, limit: int, offset: int) -> list[TimelineEvent]:
        # Ids are assigned in insertion order, which is the audit order.
        result = await self.session.execute(
            select(TimelineEventModel)
            .where(TimelineEventModel.document_id == document_id)
            .order_by(TimelineEventModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def list_for_documents(
        self, document_ids: Collection[UUID], limit: int, offset: int
    ) -> list[TimelineEvent]:
        if not document_ids:
            return []
        result = await self.session.execute(
            select(TimelineEventModel)
            .where(TimelineEventModel.document_id.in_(list(document_ids)))
            .order_by(TimelineEventModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def count_for_documents(self, document_ids: Collection[UUID]) -> int:
        if not document_ids:
            return 0
        total = await self.session.scalar(
            select(func.count())
            .select_from(TimelineEventModel)
            .where(TimelineEventModel.document_id.in_(list(document_ids)))
        )
        return total or 0


def _to_entity(model: TimelineEventModel) -> TimelineEvent:
    return TimelineEvent(
        id=model.id,
        document_id=model.document_id,
        version_id=model.version_id,
        event_type=TimelineEventType(model.event_type),
        actor_user_id=model.actor_user_id,
        notes=model.notes,
        occurred_at=model.occurred_at,
    )
