import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.infrastructure.database import Base


class RevisionRequestModel(Base):
    __tablename__ = "revision_requests"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"), nullable=False, index=True
    )
    version_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("document_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    requester_user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False)
    requirements: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, server_default="PROGRESS")
    created_at: Mapped[datetime] = mapped_column(server_default=func.now())

    attachments: Mapped[list["RevisionAttachmentModel"]] = relationship(
        back_populates="revision_request",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class RevisionAttachmentModel(Base):
    __tablename__ = "revision_attachments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    revision_request_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("revision_requests.id", ondelete="CASCADE"), nullable=False, index=True
    )
    blob_ref: Mapped[str] = mapped_column(String(512), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    mime: Mapped[str] = mapped_column(String(64), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False)
    width: Mapped[int | None] = mapped_column(Integer, nullable=True)
    height: Mapped[int | None] = mapped_column(Integer, nullable=True)

    revision_request: Mapped[RevisionRequestModel] = relationship(back_populates="attachments")
