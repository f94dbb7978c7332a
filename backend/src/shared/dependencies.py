from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from auth.application.services import resolve_subject
from auth.domain.entities import Subject
from shared.config import settings
from shared.infrastructure.database import async_session
from shared.infrastructure.redis import get_redis_pool
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from storage.domain.blob_store import BlobStore
from storage.infrastructure.local_blob_store import LocalBlobStore
from versions.domain.lock import VersionLock
from versions.infrastructure.redis_lock import RedisVersionLock

security = HTTPBearer()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session() as session:
        yield session


async def get_uow(db: AsyncSession = Depends(get_db)) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(db)


async def get_current_subject(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> Subject:
    return resolve_subject(credentials.credentials)


def get_blob_store() -> BlobStore:
    return LocalBlobStore(settings.BLOB_STORAGE_ROOT, settings.BLOB_PUBLIC_BASE_URL)


def get_version_lock() -> VersionLock | None:
    if settings.VERSION_LOCK_BACKEND == "redis":
        return RedisVersionLock(get_redis_pool(), timeout=settings.VERSION_LOCK_TIMEOUT_SECONDS)
    return None
