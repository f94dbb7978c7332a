from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from versions.domain.entities import ChangeType, DocumentVersion
from versions.domain.labels import parse_label
from versions.infrastructure.models import DocumentVersionModel


class DbVersionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_document(self, document_id: UUID, version_id: UUID) -> DocumentVersion | None:
        result = await self.session.execute(
            select(DocumentVersionModel).where(
                DocumentVersionModel.id == version_id,
                DocumentVersionModel.document_id == document_id,
            )
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def list_for_document(self, document_id: UUID) -> list[DocumentVersion]:
        result = await self.session.execute(
            select(DocumentVersionModel).where(DocumentVersionModel.document_id == document_id)
        )
        # Labels grow with creation order, so they sort newest-first without
        # relying on timestamp resolution.
        versions = [_to_entity(m) for m in result.scalars().all()]
        return sorted(versions, key=lambda v: parse_label(v.version_label), reverse=True)

    async def create(self, version: DocumentVersion) -> DocumentVersion:
        model = DocumentVersionModel(
            document_id=version.document_id,
            version_label=version.version_label,
            change_type=version.change_type.value,
            change_log=version.change_log,
            content_hash=version.content_hash,
            blob_ref=version.blob_ref,
            file_name=version.file_name,
            file_mime=version.file_mime,
            file_size=version.file_size,
            created_by=version.created_by,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        return _to_entity(model)

    async def delete(self, version_id: UUID) -> None:
        await self.session.execute(
            delete(DocumentVersionModel).where(DocumentVersionModel.id == version_id)
        )


def _to_entity(model: DocumentVersionModel) -> DocumentVersion:
    return DocumentVersion(
        id=model.id,
        document_id=model.document_id,
        version_label=model.version_label,
        change_type=ChangeType(model.change_type),
        change_log=model.change_log,
        content_hash=model.content_hash,
        blob_ref=model.blob_ref,
        file_name=model.file_name,
        file_mime=model.file_mime,
        file_size=model.file_size,
        created_by=model.created_by,
        created_at=model.created_at,
    )
