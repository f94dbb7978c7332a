from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from revisions.domain.entities import RevisionRequest, RevisionStatus
from storage.domain.blob_store import BlobStore


class UpdateRevisionStatusRequest(BaseModel):
    # Case-insensitive; validated by the service.
    status: str


class AttachmentResponse(BaseModel):
    id: UUID
    file_name: str
    mime: str
    size: int
    width: int | None = None
    height: int | None = None
    url: str


class RevisionRequestResponse(BaseModel):
    id: UUID
    document_id: UUID
    version_id: UUID
    requester_user_id: str
    title: str | None = None
    notes: str
    requirements: str | None = None
    status: RevisionStatus
    created_at: datetime | None = None
    attachments: list[AttachmentResponse] = []

    @classmethod
    def from_request(cls, request: RevisionRequest, blob_store: BlobStore) -> "RevisionRequestResponse":
        return cls(
            id=request.id,
            document_id=request.document_id,
            version_id=request.version_id,
            requester_user_id=request.requester_user_id,
            title=request.title,
            notes=request.notes,
            requirements=request.requirements,
            status=request.status,
            created_at=request.created_at,
            attachments=[
                AttachmentResponse(
                    id=a.id,
                    file_name=a.file_name,
                    mime=a.mime,
                    size=a.size,
                    width=a.width,
                    height=a.height,
                    url=blob_store.url_for(a.blob_ref),
                )
                for a in request.attachments
            ],
        )
