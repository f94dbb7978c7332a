from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from revisions.domain.entities import RevisionAttachment, RevisionRequest, RevisionStatus
from revisions.infrastructure.models import RevisionAttachmentModel, RevisionRequestModel
from shared.exceptions import NotFoundError


class DbRevisionRequestRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, request_id: UUID) -> RevisionRequest | None:
        model = await self._load(request_id)
        return _to_entity(model) if model else None

    async def list_for_version(self, version_id: UUID) -> list[RevisionRequest]:
        result = await self.session.execute(
            select(RevisionRequestModel)
            .where(RevisionRequestModel.version_id == version_id)
            .options(selectinload(RevisionRequestModel.attachments))
            .order_by(RevisionRequestModel.created_at.desc())
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def create(self, request: RevisionRequest) -> RevisionRequest:
        model = RevisionRequestModel(
            document_id=request.document_id,
            version_id=request.version_id,
            requester_user_id=request.requester_user_id,
            title=request.title,
            notes=request.notes,
            requirements=request.requirements,
            status=request.status.value,
            attachments=[
                RevisionAttachmentModel(
                    blob_ref=a.blob_ref,
                    file_name=a.file_name,
                    mime=a.mime,
                    size=a.size,
                    width=a.width,
                    height=a.height,
                )
                for a in request.attachments
            ],
        )
        self.session.add(model)
        await self.session.flush()
        return _to_entity(await self._load(model.id))

    async def update_status(self, request_id: UUID, status: RevisionStatus) -> RevisionRequest:
        result = await self.session.execute(
            update(RevisionRequestModel)
            .where(RevisionRequestModel.id == request_id)
            .values(status=status.value)
        )
        if result.rowcount == 0:
            raise NotFoundError("Revision request", str(request_id))
        return _to_entity(await self._load(request_id))

    async def delete_for_version(self, version_id: UUID) -> list[str]:
        result = await self.session.execute(
            select(RevisionAttachmentModel.blob_ref)
            .join(RevisionRequestModel)
            .where(RevisionRequestModel.version_id == version_id)
        )
        blob_refs = list(result.scalars().all())

        request_ids = select(RevisionRequestModel.id).where(
            RevisionRequestModel.version_id == version_id
        )
        await self.session.execute(
            delete(RevisionAttachmentModel).where(
                RevisionAttachmentModel.revision_request_id.in_(request_ids)
            )
        )
        await self.session.execute(
            delete(RevisionRequestModel).where(RevisionRequestModel.version_id == version_id)
        )
        return blob_refs

    async def _load(self, request_id: UUID) -> RevisionRequestModel | None:
        result = await self.session.execute(
            select(RevisionRequestModel)
            .where(RevisionRequestModel.id == request_id)
            .options(selectinload(RevisionRequestModel.attachments))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()


def _to_entity(model: RevisionRequestModel) -> RevisionRequest:
    return RevisionRequest(
        id=model.id,
        document_id=model.document_id,
        version_id=model.version_id,
        requester_user_id=model.requester_user_id,
        title=model.title,
        notes=model.notes,
        requirements=model.requirements,
        status=RevisionStatus(model.status),
        created_at=model.created_at,
        attachments=[
            RevisionAttachment(
                id=a.id,
                revision_request_id=a.revision_request_id,
                blob_ref=a.blob_ref,
                file_name=a.file_name,
                mime=a.mime,
                size=a.size,
                width=a.width,
                height=a.height,
            )
            for a in model.attachments
        ],
    )
