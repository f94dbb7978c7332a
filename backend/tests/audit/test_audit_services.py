from datetime import date, timedelta

import pytest
from sqlalchemy import update

from audit.application.services import list_audit_logs, record_action
from audit.domain.entities import AuditAction
from audit.infrastructure.models import AuditLogModel
from auth.domain.entities import Subject
from comments.application.services import add_comment
from conftest import ADMIN, OWNER, PDF, PDF_BYTES, READER, make_document
from documents.application.services import get_document, set_status, update_document
from shared.exceptions import AuthorizationError, ValidationError
from versions.application.services import create_version, get_download

AUDITOR = Subject.build("auditor", permission_codes=["USER_MANAGE"])


async def _actions(uow) -> list[str]:
    page = await list_audit_logs(uow, ADMIN, limit=200)
    return [entry.action for entry in page.entries]


async def test_operations_are_audited(uow, blob_store):
    doc = await make_document(uow, title="Quality Manual")
    await update_document(uow, OWNER, doc.id, summary="Scope")
    await set_status(uow, OWNER, doc.id, "IN_REVIEW")
    version = await create_version(
        uow, blob_store, OWNER, doc.id, PDF_BYTES, file_name="qm.pdf", mime_type=PDF
    )
    await get_download(uow, blob_store, OWNER, doc.id)
    await get_document(uow, READER, doc.id)
    await add_comment(uow, READER, doc.id, "Reads well")

    assert await _actions(uow) == [
        "COMMENT_ADD",
        "DOC_READ",
        "DOC_DOWNLOAD",
        "DOC_UPLOAD",
        "DOC_UPDATE",
        "DOC_UPDATE",
        "DOC_CREATE",
    ]

    page = await list_audit_logs(uow, ADMIN, action="DOC_UPLOAD")
    upload = page.entries[0]
    assert upload.actor_user_id == OWNER.id
    assert upload.resource_type == "DocumentVersion"
    assert upload.resource_id == str(version.id)
    assert upload.meta == {
        "document_id": str(doc.id),
        "file_name": "qm.pdf",
        "file_size": len(PDF_BYTES),
        "version": "1.0",
    }

    status_change = (await list_audit_logs(uow, ADMIN, action="DOC_UPDATE")).entries[0]
    assert status_change.meta["changes"] == ["status"]
    assert status_change.meta["previous_status"] == "DRAFT"


async def test_denied_operation_leaves_no_entry(uow):
    doc = await make_document(uow)
    with pytest.raises(AuthorizationError):
        await update_document(uow, READER, doc.id, title="Nope")
    assert await _actions(uow) == ["DOC_CREATE"]


async def test_audit_log_requires_user_manage(uow):
    await make_document(uow)
    assert (await list_audit_logs(uow, AUDITOR)).total == 1
    with pytest.raises(AuthorizationError):
        await list_audit_logs(uow, OWNER)


async def test_filters_and_paging(uow):
    async with uow:
        for i in range(5):
            await record_action(uow, f"user-{i % 2}", AuditAction.DOC_READ, "Document", i, title=f"Doc {i}")
        await record_action(uow, "user-0", AuditAction.COMMENT_ADD, "Comment", "c1")
        await uow.commit()

    page = await list_audit_logs(uow, ADMIN, page=2, limit=4)
    assert (page.total, page.total_pages, len(page.entries)) == (6, 2, 2)

    assert (await list_audit_logs(uow, ADMIN, user_id="user-1")).total == 2
    assert (await list_audit_logs(uow, ADMIN, resource_type="Comment")).total == 1
    assert (await list_audit_logs(uow, ADMIN, action="read")).total == 5
    assert [e.meta["title"] for e in (await list_audit_logs(uow, ADMIN, search="Doc 3")).entries] == ["Doc 3"]


async def test_date_range_is_inclusive(uow):
    async with uow:
        entry = await record_action(uow, "user-0", AuditAction.DOC_READ, "Document", "d1")
        await uow.commit()

    today = entry.at.date()
    assert (await list_audit_logs(uow, ADMIN, date_from=today, date_to=today)).total == 1
    assert (await list_audit_logs(uow, ADMIN, date_to=today - timedelta(days=1))).total == 0
    assert (await list_audit_logs(uow, ADMIN, date_from=today + timedelta(days=1))).total == 0

    # Push the entry back a week; it must now fall outside "today".
    async with uow:
        await uow.session.execute(
            update(AuditLogModel).values(at=entry.at - timedelta(days=7))
        )
        await uow.commit()
    assert (await list_audit_logs(uow, ADMIN, date_from=today)).total == 0
    assert (await list_audit_logs(uow, ADMIN, date_from=date.min, date_to=today)).total == 1


async def test_invalid_page(uow):
    with pytest.raises(ValidationError):
        await list_audit_logs(uow, ADMIN, page=0)
