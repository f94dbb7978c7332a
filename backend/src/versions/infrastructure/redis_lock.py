import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from redis.asyncio import Redis
from redis.exceptions import LockError, RedisError

from shared.exceptions import StorageUnavailableError, VersionLabelConflictError

logger = logging.getLogger(__name__)


class RedisVersionLock:
    """Per-document upload lock held in Redis for the length of one upload."""

    def __init__(self, redis: Redis, timeout: float = 10.0, prefix: str = "docflow:version-lock"):
        self.redis = redis
        self.timeout = timeout
        self.prefix = prefix

    @asynccontextmanager
    async def hold(self, document_id: UUID) -> AsyncIterator[None]:
        lock = self.redis.lock(
            f"{self.prefix}:{document_id}",
            timeout=self.timeout,
            blocking_timeout=self.timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as exc:
            raise StorageUnavailableError(f"Version lock unavailable: {exc}") from exc
        if not acquired:
            raise VersionLabelConflictError(document_id)

        try:
            yield
        finally:
            try:
                await lock.release()
            except (LockError, RedisError):
                # Expired or lost; the row_version check still guards the write.
                logger.warning("Could not release version lock for %s", document_id, exc_info=True)
