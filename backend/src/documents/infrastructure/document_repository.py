from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from documents.domain.entities import (
    Classification,
    Document,
    DocumentStatus,
    Visibility,
)
from documents.infrastructure.models import DocumentModel, TagModel, document_tags
from shared.exceptions import ConflictError


class DbDocumentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, document_id: UUID, *, for_update: bool = False) -> Document | None:
        stmt = select(DocumentModel).where(DocumentModel.id == document_id)
        if for_update:
            # Row lock on PostgreSQL; SQLite renders no FOR UPDATE clause.
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        model = result.scalar_one_or_none()
        if not model:
            return None
        tags = await self._tag_names([model.id])
        return _to_entity(model, tags.get(model.id, []))

    async def list_filtered(
        self,
        *,
        status: DocumentStatus | None = None,
        visibility: Visibility | None = None,
        search: str | None = None,
        viewer_id: str | None = None,
        viewer_unit_ids: frozenset[str] = frozenset(),
        tag: str | None = None,
    ) -> list[Document]:
        stmt = select(DocumentModel)
        if status is not None:
            stmt = stmt.where(DocumentModel.status == status.value)
        if visibility is not None:
            stmt = stmt.where(DocumentModel.visibility == visibility.value)
        if search:
            stmt = stmt.where(
                or_(
                    DocumentModel.title.icontains(search, autoescape=True),
                    DocumentModel.summary.icontains(search, autoescape=True),
                    DocumentModel.category.icontains(search, autoescape=True),
                )
            )
        if tag:
            stmt = stmt.where(
                DocumentModel.id.in_(
                    select(document_tags.c.document_id)
                    .join(TagModel, TagModel.id == document_tags.c.tag_id)
                    .where(TagModel.name == tag)
                )
            )
        if viewer_id is not None:
            reachable = [
                DocumentModel.visibility.in_([Visibility.PUBLIC.value, Visibility.INTERNAL.value]),
                DocumentModel.owner_user_id == viewer_id,
            ]
            if viewer_unit_ids:
                reachable.append(DocumentModel.unit_id.in_(sorted(viewer_unit_ids)))
            stmt = stmt.where(or_(*reachable))

        result = await self.session.execute(
            stmt.order_by(DocumentModel.updated_at.desc(), DocumentModel.created_at.desc())
        )
        models = result.scalars().all()
        tags = await self._tag_names([m.id for m in models])
        return [_to_entity(m, tags.get(m.id, [])) for m in models]

    async def create(self, document: Document) -> Document:
        model = DocumentModel(
            title=document.title,
            summary=document.summary,
            category=document.category,
            owner_user_id=document.owner_user_id,
            unit_id=document.unit_id,
            visibility=document.visibility.value,
            classification=document.classification.value,
            status=document.status.value,
            effective_date=document.effective_date,
            expiry_date=document.expiry_date,
        )
        self.session.add(model)
        await self.session.flush()
        await self.session.refresh(model)
        if document.tags:
            await self._link_tags(model.id, document.tags)
        return _to_entity(model, list(document.tags))

    async def update(self, document: Document, expected_row_version: int) -> Document:
        result = await self.session.execute(
            update(DocumentModel)
            .where(
                DocumentModel.id == document.id,
                DocumentModel.row_version == expected_row_version,
            )
            .values(
                title=document.title,
                summary=document.summary,
                category=document.category,
                visibility=document.visibility.value,
                classification=document.classification.value,
                status=document.status.value,
                effective_date=document.effective_date,
                expiry_date=document.expiry_date,
                current_version_id=document.current_version_id,
                last_version_label=document.last_version_label,
                row_version=expected_row_version + 1,
            )
        )
        if result.rowcount == 0:
            raise ConflictError("Document was modified by another user")

        current_tags = (await self._tag_names([document.id])).get(document.id, [])
        if current_tags != list(document.tags):
            await self.session.execute(
                delete(document_tags).where(document_tags.c.document_id == document.id)
            )
            if document.tags:
                await self._link_tags(document.id, document.tags)

        refreshed = await self.session.execute(
            select(DocumentModel)
            .where(DocumentModel.id == document.id)
            .execution_options(populate_existing=True)
        )
        return _to_entity(refreshed.scalar_one(), list(document.tags))

    async def _link_tags(self, document_id: UUID, names: Iterable[str]) -> None:
        """Attach tags by name, creating the ones that do not exist yet."""
        names = list(names)
        result = await self.session.execute(select(TagModel).where(TagModel.name.in_(names)))
        by_name = {tag.name: tag for tag in result.scalars().all()}
        for name in names:
            if name not in by_name:
                by_name[name] = TagModel(name=name)
                self.session.add(by_name[name])
        await self.session.flush()
        await self.session.execute(
            insert(document_tags),
            [{"document_id": document_id, "tag_id": by_name[name].id} for name in names],
        )

    async def _tag_names(self, document_ids: list[UUID]) -> dict[UUID, list[str]]:
        if not document_ids:
            return {}
        result = await self.session.execute(
            select(document_tags.c.document_id, TagModel.name)
            .join(TagModel, TagModel.id == document_tags.c.tag_id)
            .where(document_tags.c.document_id.in_(document_ids))
            .order_by(TagModel.name)
        )
        names: dict[UUID, list[str]] = {}
        for document_id, name in result.all():
            names.setdefault(document_id, []).append(name)
        return names


def _to_entity(model: DocumentModel, tags: list[str]) -> Document:
    return Document(
        id=model.id,
        title=model.title,
        summary=model.summary,
        category=model.category,
        owner_user_id=model.owner_user_id,
        unit_id=model.unit_id,
        visibility=Visibility(model.visibility),
        classification=Classification(model.classification),
        status=DocumentStatus(model.status),
        effective_date=model.effective_date,
        expiry_date=model.expiry_date,
        current_version_id=model.current_version_id,
        last_version_label=model.last_version_label,
        row_version=model.row_version,
        tags=tags,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )
