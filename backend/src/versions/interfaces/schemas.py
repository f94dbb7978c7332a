from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from versions.domain.entities import ChangeType, DocumentVersion


class VersionResponse(BaseModel):
    id: UUID
    document_id: UUID
    version_label: str
    change_type: ChangeType
    change_log: str
    content_hash: str
    file_name: str | None = None
    file_mime: str | None = None
    file_size: int
    created_by: str
    created_at: datetime | None = None
    download_url: str | None = None

    @classmethod
    def from_version(cls, version: DocumentVersion, download_url: str | None = None) -> "VersionResponse":
        return cls(
            id=version.id,
            document_id=version.document_id,
            version_label=version.version_label,
            change_type=version.change_type,
            change_log=version.change_log,
            content_hash=version.content_hash,
            file_name=version.file_name,
            file_mime=version.file_mime,
            file_size=version.file_size,
            created_by=version.created_by,
            created_at=version.created_at,
            download_url=download_url,
        )


class DownloadResponse(BaseModel):
    version_id: UUID
    version_label: str
    file_name: str | None = None
    file_mime: str | None = None
    content_hash: str
    url: str
