from datetime import date

from fastapi import APIRouter, Depends

from audit.application.services import DEFAULT_PAGE_SIZE, list_audit_logs
from audit.interfaces.schemas import AuditLogPageResponse
from auth.domain.entities import Subject
from shared.dependencies import get_current_subject, get_uow
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork

router = APIRouter(prefix="/api/audit-logs", tags=["audit"])


@router.get("", response_model=AuditLogPageResponse)
async def list_all(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    search: str | None = None,
    action: str | None = None,
    resource_type: str | None = None,
    user_id: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    result = await list_audit_logs(
        uow,
        subject,
        page=page,
        limit=limit,
        search=search,
        action=action,
        resource_type=resource_type,
        user_id=user_id,
        date_from=date_from,
        date_to=date_to,
    )
    return AuditLogPageResponse.from_page(result)
