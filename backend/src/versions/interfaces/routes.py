from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile

from auth.domain.entities import Subject
from shared.dependencies import get_blob_store, get_current_subject, get_uow, get_version_lock
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from storage.domain.blob_store import BlobStore
from versions.application.services import (
    create_version,
    delete_version,
    get_download,
    get_version,
    list_versions,
    set_current_version,
)
from versions.domain.lock import VersionLock
from versions.interfaces.schemas import DownloadResponse, VersionResponse

router = APIRouter(prefix="/api/documents/{document_id}", tags=["versions"])


@router.post("/versions", response_model=VersionResponse, status_code=201)
async def upload(
    document_id: UUID,
    file: UploadFile = File(...),
    change_type: str = Form("MAJOR"),
    change_log: str | None = Form(None),
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
    blob_store: BlobStore = Depends(get_blob_store),
    lock: VersionLock | None = Depends(get_version_lock),
):
    data = await file.read()
    version = await create_version(
        uow,
        blob_store,
        subject,
        document_id,
        data,
        change_type=change_type.strip().upper(),
        change_log=change_log,
        file_name=file.filename,
        mime_type=file.content_type,
        lock=lock,
    )
    return VersionResponse.from_version(version, blob_store.url_for(version.blob_ref))


@router.get("/versions", response_model=list[VersionResponse])
async def list_all(
    document_id: UUID,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    versions = await list_versions(uow, subject, document_id)
    return [VersionResponse.from_version(v) for v in versions]


@router.get("/versions/{version_id}", response_model=VersionResponse)
async def get_one(
    document_id: UUID,
    version_id: UUID,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return VersionResponse.from_version(await get_version(uow, subject, document_id, version_id))


@router.delete("/versions/{version_id}", status_code=204)
async def delete(
    document_id: UUID,
    version_id: UUID,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
    blob_store: BlobStore = Depends(get_blob_store),
):
    await delete_version(uow, blob_store, subject, document_id, version_id)


@router.put("/current-version/{version_id}", response_model=VersionResponse)
async def make_current(
    document_id: UUID,
    version_id: UUID,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
):
    return VersionResponse.from_version(
        await set_current_version(uow, subject, document_id, version_id)
    )


@router.get("/download", response_model=DownloadResponse)
async def download(
    document_id: UUID,
    version_id: UUID | None = None,
    subject: Subject = Depends(get_current_subject),
    uow: SqlAlchemyUnitOfWork = Depends(get_uow),
    blob_store: BlobStore = Depends(get_blob_store),
):
    version, url = await get_download(uow, blob_store, subject, document_id, version_id)
    return DownloadResponse(
        version_id=version.id,
        version_label=version.version_label,
        file_name=version.file_name,
        file_mime=version.file_mime,
        content_hash=version.content_hash,
        url=url,
    )
