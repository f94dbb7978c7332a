from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from audit.domain.entities import AuditAction, AuditEntry, AuditLogPage
from auth.domain.entities import Subject
from documents.domain.permissions import is_admin
from shared.exceptions import AuthorizationError, ValidationError
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork

USER_MANAGE = "USER_MANAGE"

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


async def record_action(
    uow: SqlAlchemyUnitOfWork,
    actor_id: str,
    action: AuditAction,
    resource_type: str,
    resource_id: Any,
    **meta: Any,
) -> AuditEntry:
    """Write an audit entry inside the caller's transaction."""
    entry = AuditEntry(
        actor_user_id=actor_id,
        action=AuditAction(action),
        resource_type=resource_type,
        resource_id=str(resource_id),
        meta={key: value for key, value in meta.items() if value is not None},
        at=datetime.now(timezone.utc),
    )
    return await uow.audit_logs.append(entry)


def can_view_audit_log(subject: Subject) -> bool:
    return is_admin(subject) or USER_MANAGE in subject.permission_codes


async def list_audit_logs(
    uow: SqlAlchemyUnitOfWork,
    subject: Subject,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: str | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    user_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> AuditLogPage:
    """
    Page through the audit log, newest first.

    Restricted to administrators and holders of USER_MANAGE. ``date_to`` is
    inclusive: the whole day is part of the range.
    """
    if not can_view_audit_log(subject):
        raise AuthorizationError("Viewing the audit log requires USER_MANAGE")
    if page < 1:
        raise ValidationError("page must be at least 1")
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    entries, total = await uow.audit_logs.search(
        limit=limit,
        offset=(page - 1) * limit,
        text=(search or "").strip() or None,
        action=(action or "").strip() or None,
        resource_type=resource_type,
        actor_user_id=user_id,
        since=_day_start(date_from) if date_from else None,
        before=_day_start(date_to + timedelta(days=1)) if date_to else None,
    )
    return AuditLogPage(entries=entries, total=total, page=page, limit=limit)


def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)
