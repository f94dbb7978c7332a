import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from audit.domain.repository import AuditLogRepository
from audit.infrastructure.audit_repository import DbAuditLogRepository
from comments.domain.repository import CommentRepository
from comments.infrastructure.comment_repository import DbCommentRepository
from documents.domain.repository import DocumentRepository
from documents.infrastructure.document_repository import DbDocumentRepository
from revisions.domain.repository import RevisionRequestRepository
from revisions.infrastructure.revision_repository import DbRevisionRequestRepository
from shared.exceptions import AppError, ConflictError, StorageUnavailableError
from timeline.domain.repository import TimelineRepository
from timeline.infrastructure.timeline_repository import DbTimelineRepository
from versions.domain.repository import VersionRepository
from versions.infrastructure.version_repository import DbVersionRepository

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork:
    """
    One database transaction shared by every repository touched by an operation.

    Repositories only flush; nothing is visible to other sessions until
    ``commit()``. Leaving the ``async with`` block through an exception rolls
    the transaction back, and database errors are translated into the
    application error taxonomy on the way out.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.documents: DocumentRepository = DbDocumentRepository(session)
        self.versions: VersionRepository = DbVersionRepository(session)
        self.revisions: RevisionRequestRepository = DbRevisionRequestRepository(session)
        self.timeline: TimelineRepository = DbTimelineRepository(session)
        self.comments: CommentRepository = DbCommentRepository(session)
        self.audit_logs: AuditLogRepository = DbAuditLogRepository(session)

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc is None:
            return False
        await self.rollback()
        if isinstance(exc, SQLAlchemyError):
            raise translate_db_error(exc) from exc
        return False

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.rollback()
            raise translate_db_error(exc) from exc

    async def rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback failed", exc_info=True)


def translate_db_error(exc: SQLAlchemyError) -> AppError:
    if isinstance(exc, IntegrityError):
        return ConflictError("Conflicting write rejected by the database")
    return StorageUnavailableError(f"Database unavailable: {exc.__class__.__name__}")
