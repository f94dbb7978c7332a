from typing import Protocol


class BlobStore(Protocol):
    """Where uploaded bytes live. Implementations raise StorageUnavailableError on failure."""

    async def put(self, data: bytes, *, content_type: str | None = None) -> str: ...

    async def delete(self, blob_ref: str) -> bool: ...

    def url_for(self, blob_ref: str) -> str: ...
