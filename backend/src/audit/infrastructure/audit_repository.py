import json
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from audit.domain.entities import AuditAction, AuditEntry
from audit.infrastructure.models import AuditLogModel


class DbAuditLogRepository:
    """Append-only, like the timeline."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, entry: AuditEntry) -> AuditEntry:
        model = AuditLogModel(
            actor_user_id=entry.actor_user_id,
            action=entry.action.value,
            resource_type=entry.resource_type,
            resource_id=entry.resource_id,
            meta=json.dumps(entry.meta, sort_keys=True, default=str) if entry.meta else None,
            at=entry.at,
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(model)

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
    ) -> tuple[list[AuditEntry], int]:
        conditions = []
        if text:
            conditions.append(
                or_(
                    AuditLogModel.action.icontains(text, autoescape=True),
                    AuditLogModel.resource_type.icontains(text, autoescape=True),
                    AuditLogModel.meta.icontains(text, autoescape=True),
                )
            )
        if action:
            conditions.append(AuditLogModel.action.icontains(action, autoescape=True))
        if resource_type:
            conditions.append(AuditLogModel.resource_type == resource_type)
        if actor_user_id:
            conditions.append(AuditLogModel.actor_user_id == actor_user_id)
        if since is not None:
            conditions.append(AuditLogModel.at >= since)
        if before is not None:
            conditions.append(AuditLogModel.at < before)

        stmt = select(AuditLogModel)
        for condition in conditions:
            stmt = stmt.where(condition)

        total = await self.session.scalar(select(func.count()).select_from(stmt.subquery()))
        result = await self.session.execute(
            stmt.order_by(AuditLogModel.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return [_to_entity(m) for m in result.scalars().all()], total or 0


def _to_entity(model: AuditLogModel) -> AuditEntry:
    return AuditEntry(
        id=model.id,
        actor_user_id=model.actor_user_id,
        action=AuditAction(model.action),
        resource_type=model.resource_type,
        resource_id=model.resource_id,
        meta=json.loads(model.meta) if model.meta else {},
        at=model.at,
    )
