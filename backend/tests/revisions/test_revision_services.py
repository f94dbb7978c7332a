from uuid import uuid4

import pytest

import revisions.application.services as revision_services
from conftest import (
    ADMIN,
    OWNER,
    PDF,
    PDF_BYTES,
    READER,
    REVIEWER,
    STRANGER,
    WRITER,
    make_document,
    make_image,
)
from revisions.application.services import (
    file_revision_request,
    list_revision_requests,
    update_revision_status,
)
from revisions.domain.entities import AttachmentUpload, RevisionStatus
from shared.exceptions import (
    AuthorizationError,
    InvalidStatusError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from versions.application.services import create_version


@pytest.fixture
async def document(uow):
    return await make_document(uow)


@pytest.fixture
async def version(uow, blob_store, document):
    return await create_version(uow, blob_store, OWNER, document.id, PDF_BYTES, mime_type=PDF)


def _png(name="shot.png", size=(40, 20)) -> AttachmentUpload:
    return AttachmentUpload(file_name=name, mime="image/png", data=make_image("PNG", size))


def _stored_files(blob_store) -> list:
    return [p for p in blob_store.root.rglob("*") if p.is_file()]


async def _file(uow, blob_store, document, version, subject=OWNER, notes="Please fix section 2", **kwargs):
    return await file_revision_request(
        uow, blob_store, subject, document.id, version.id, notes, **kwargs
    )


async def test_file_request_without_attachments(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version, title="Typos")

    assert request.id is not None
    assert request.status == RevisionStatus.PROGRESS
    assert request.requester_user_id == OWNER.id
    assert request.notes == "Please fix section 2"
    assert request.attachments == []

    latest = (await uow.timeline.list_for_document(document.id, limit=1, offset=0))[0]
    assert latest.event_type == "REVIEW_REQUESTED"
    assert latest.version_id == version.id
    assert latest.notes == "Revision requested: Typos"


async def test_event_notes_without_title(uow, blob_store, document, version):
    await _file(uow, blob_store, document, version)
    latest = (await uow.timeline.list_for_document(document.id, limit=1, offset=0))[0]
    assert latest.notes == "Revision requested"


async def test_five_attachments_allowed(uow, blob_store, document, version):
    uploads = [_png(f"shot-{i}.png") for i in range(5)]
    request = await _file(uow, blob_store, document, version, attachments=uploads)

    assert len(request.attachments) == 5
    names = sorted(a.file_name for a in request.attachments)
    assert names == [f"shot-{i}.jpg" for i in range(5)]
    for attachment in request.attachments:
        assert attachment.mime == "image/jpeg"
        assert (attachment.width, attachment.height) == (40, 20)
        stored = (blob_store.root / attachment.blob_ref).read_bytes()
        assert attachment.size == len(stored)
        assert stored[:2] == b"\xff\xd8"


async def test_six_attachments_rejected(uow, blob_store, document, version):
    files_before = _stored_files(blob_store)
    for _ in range(2):
        with pytest.raises(ValidationError):
            await _file(uow, blob_store, document, version, attachments=[_png() for _ in range(6)])
    assert await list_revision_requests(uow, OWNER, document.id, version.id) == []
    assert _stored_files(blob_store) == files_before


async def test_disallowed_attachment_type(uow, blob_store, document, version):
    upload = AttachmentUpload(file_name="notes.pdf", mime=PDF, data=PDF_BYTES)
    with pytest.raises(ValidationError):
        await _file(uow, blob_store, document, version, attachments=[upload])


async def test_undecodable_image_rejected(uow, blob_store, document, version):
    upload = AttachmentUpload(file_name="fake.png", mime="image/png", data=b"not an image")
    with pytest.raises(ValidationError):
        await _file(uow, blob_store, document, version, attachments=[upload])


@pytest.mark.parametrize("notes", ["", "   ", None])
async def test_notes_required(uow, blob_store, document, version, notes):
    with pytest.raises(ValidationError):
        await _file(uow, blob_store, document, version, notes=notes)


async def test_notes_are_trimmed(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version, notes="  tidy up  ")
    assert request.notes == "tidy up"


async def test_version_must_belong_to_document(uow, blob_store, document, version):
    other = await make_document(uow, title="Other")
    with pytest.raises(NotFoundError):
        await _file(uow, blob_store, other, version)


async def test_missing_version(uow, blob_store, document):
    with pytest.raises(NotFoundError):
        await file_revision_request(uow, blob_store, OWNER, document.id, uuid4(), "notes")


@pytest.mark.parametrize("subject", [OWNER, WRITER, REVIEWER, ADMIN])
async def test_who_may_file(uow, blob_store, document, version, subject):
    request = await _file(uow, blob_store, document, version, subject=subject)
    assert request.requester_user_id == subject.id


@pytest.mark.parametrize("subject", [READER, STRANGER])
async def test_who_may_not_file(uow, blob_store, document, version, subject):
    with pytest.raises(AuthorizationError):
        await _file(uow, blob_store, document, version, subject=subject)


async def test_failed_commit_releases_attachment_blobs(uow, blob_store, document, version, monkeypatch):
    files_before = _stored_files(blob_store)

    async def failing_append(*args, **kwargs):
        raise StorageUnavailableError("timeline down")

    monkeypatch.setattr(revision_services, "append_event", failing_append)

    with pytest.raises(StorageUnavailableError):
        await _file(uow, blob_store, document, version, attachments=[_png(), _png()])

    assert _stored_files(blob_store) == files_before
    assert await list_revision_requests(uow, OWNER, document.id, version.id) == []


async def test_update_status_case_insensitive(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version)
    updated = await update_revision_status(
        uow, REVIEWER, document.id, version.id, request.id, "done"
    )
    assert updated.status == RevisionStatus.DONE


async def test_update_status_any_to_any(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version)
    for status in ["DENIED", "PROGRESS", "POSTPONE", "DONE", "PROGRESS"]:
        updated = await update_revision_status(
            uow, WRITER, document.id, version.id, request.id, status
        )
        assert updated.status == status


async def test_update_status_invalid_leaves_record(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version)
    with pytest.raises(ValidationError) as excinfo:
        await update_revision_status(uow, REVIEWER, document.id, version.id, request.id, "FINISHED")
    assert isinstance(excinfo.value, InvalidStatusError)

    stored = await uow.revisions.get_by_id(request.id)
    assert stored.status == RevisionStatus.PROGRESS


async def test_update_status_requires_review(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version)
    # Filing is open to the owner, managing status is not.
    with pytest.raises(AuthorizationError):
        await update_revision_status(uow, OWNER, document.id, version.id, request.id, "DONE")
    with pytest.raises(AuthorizationError):
        await update_revision_status(uow, READER, document.id, version.id, request.id, "DONE")


async def test_update_status_records_no_event(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version)
    before = await uow.timeline.list_for_document(document.id, limit=50, offset=0)
    await update_revision_status(uow, ADMIN, document.id, version.id, request.id, "DONE")
    after = await uow.timeline.list_for_document(document.id, limit=50, offset=0)
    assert len(after) == len(before)


async def test_update_status_wrong_version(uow, blob_store, document, version):
    request = await _file(uow, blob_store, document, version)
    other = await create_version(uow, blob_store, OWNER, document.id, PDF_BYTES, mime_type=PDF)
    with pytest.raises(NotFoundError):
        await update_revision_status(uow, ADMIN, document.id, other.id, request.id, "DONE")


async def test_list_revision_requests(uow, blob_store, document, version):
    await _file(uow, blob_store, document, version, attachments=[_png()])
    await _file(uow, blob_store, document, version)

    requests = await list_revision_requests(uow, READER, document.id, version.id)
    assert len(requests) == 2
    assert sorted(len(r.attachments) for r in requests) == [0, 1]

    with pytest.raises(AuthorizationError):
        await list_revision_requests(uow, STRANGER, document.id, version.id)


class RejectingBlobStore:
    """Stores through to the real store until the n-th put, which fails."""

    def __init__(self, inner, fail_on: int):
        self.inner = inner
        self.fail_on = fail_on
        self.puts = 0

    async def put(self, data, content_type=None):
        self.puts += 1
        if self.puts == self.fail_on:
            raise StorageUnavailableError("bucket unavailable")
        return await self.inner.put(data, content_type=content_type)

    async def delete(self, blob_ref):
        return await self.inner.delete(blob_ref)

    def url_for(self, blob_ref):
        return self.inner.url_for(blob_ref)


async def test_store_failure_midway_releases_earlier_attachments(uow, blob_store, document, version):
    files_before = _stored_files(blob_store)
    flaky = RejectingBlobStore(blob_store, fail_on=2)

    with pytest.raises(StorageUnavailableError):
        await _file(uow, flaky, document, version, attachments=[_png(), _png(), _png()])

    assert flaky.puts == 2
    assert _stored_files(blob_store) == files_before
    assert await list_revision_requests(uow, OWNER, document.id, version.id) == []


@pytest.mark.parametrize("mime", ["image/heic", "image/heif"])
async def test_heif_attachment_normalized(uow, blob_store, document, version, mime):
    upload = AttachmentUpload(file_name="photo.heic", mime=mime, data=make_image("HEIF", mode="RGB"))
    request = await _file(uow, blob_store, document, version, attachments=[upload])

    attachment = request.attachments[0]
    assert attachment.file_name == "photo.jpg"
    assert attachment.mime == "image/jpeg"
    assert (attachment.width, attachment.height) == (40, 20)
