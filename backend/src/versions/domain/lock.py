from contextlib import AbstractAsyncContextManager
from typing import Protocol
from uuid import UUID


class VersionLock(Protocol):
    """Serializes version uploads for one document across processes."""

    def hold(self, document_id: UUID) -> AbstractAsyncContextManager[None]: ...
