from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID


class DocumentStatus(StrEnum):
    DRAFT = "DRAFT"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    PUBLISHED = "PUBLISHED"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    RETIRED = "RETIRED"


class Visibility(StrEnum):
    PUBLIC = "PUBLIC"
    INTERNAL = "INTERNAL"
    RESTRICTED = "RESTRICTED"


class Classification(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


@dataclass
class Document:
    title: str
    owner_user_id: str
    unit_id: str
    visibility: Visibility = Visibility.INTERNAL
    classification: Classification = Classification.LOW
    status: DocumentStatus = DocumentStatus.DRAFT
    summary: str | None = None
    category: str | None = None
    effective_date: date | None = None
    expiry_date: date | None = None
    current_version_id: UUID | None = None
    last_version_label: str | None = None
    row_version: int = 1
    tags: list[str] = field(default_factory=list)
    id: UUID | None = field(default=None)
    created_at: datetime | None = field(default=None)
    updated_at: datetime | None = field(default=None)
