from uuid import UUID

from auth.domain.entities import Subject
from documents.domain.entities import Document, DocumentStatus, Visibility
from documents.domain.permissions import Action, can_perform, is_admin
from documents.domain.repository import DocumentRepository
from shared.exceptions import NotFoundError


async def load_document(
    repo: DocumentRepository, document_id: UUID, *, for_update: bool = False
) -> Document:
    doc = await repo.get_by_id(document_id, for_update=for_update)
    if not doc:
        raise NotFoundError("Document", str(document_id))
    return doc


async def readable_documents(
    repo: DocumentRepository,
    subject: Subject,
    *,
    status: DocumentStatus | None = None,
    visibility: Visibility | None = None,
    search: str | None = None,
    tag: str | None = None,
) -> list[Document]:
    """
    Documents the subject may read.

    The query narrows by visibility, ownership and unit first; the evaluator
    has the final word on each candidate. Admins see everything.
    """
    if is_admin(subject):
        return await repo.list_filtered(status=status, visibility=visibility, search=search, tag=tag)

    candidates = await repo.list_filtered(
        status=status,
        visibility=visibility,
        search=search,
        tag=tag,
        viewer_id=subject.id,
        viewer_unit_ids=subject.unit_ids,
    )
    return [doc for doc in candidates if can_perform(subject, doc, Action.READ)]
