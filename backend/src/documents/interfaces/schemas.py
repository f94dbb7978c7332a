from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from documents.domain.entities import Classification, DocumentStatus, Visibility


class CreateDocumentRequest(BaseModel):
    title: str
    unit_id: str
    summary: str | None = None
    category: str | None = None
    visibility: Visibility = Visibility.INTERNAL
    classification: Classification = Classification.LOW
    effective_date: date | None = None
    expiry_date: date | None = None
    tags: list[str] = []


class UpdateDocumentRequest(BaseModel):
    title: str | None = None
    summary: str | None = None
    category: str | None = None
    visibility: Visibility | None = None
    classification: Classification | None = None
    effective_date: date | None = None
    expiry_date: date | None = None
    tags: list[str] | None = None
    expected_row_version: int | None = None


class SetStatusRequest(BaseModel):
    # Plain string so an unknown value surfaces as InvalidStatusError (400).
    status: str


class DocumentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    summary: str | None = None
    category: str | None = None
    owner_user_id: str
    unit_id: str
    visibility: Visibility
    classification: Classification
    status: DocumentStatus
    effective_date: date | None = None
    expiry_date: date | None = None
    current_version_id: UUID | None = None
    tags: list[str] = []
    row_version: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
