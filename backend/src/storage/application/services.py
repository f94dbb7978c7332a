import logging
from collections.abc import Iterable

from shared.exceptions import AppError, StorageUnavailableError
from storage.domain.blob_store import BlobStore

logger = logging.getLogger(__name__)


async def put_blob(blob_store: BlobStore, data: bytes, content_type: str | None = None) -> str:
    """Store bytes, surfacing any adapter failure as StorageUnavailableError."""
    try:
        return await blob_store.put(data, content_type=content_type)
    except AppError:
        raise
    except Exception as exc:
        raise StorageUnavailableError(f"Blob store rejected upload: {exc}") from exc


async def release_blobs(blob_store: BlobStore, blob_refs: Iterable[str]) -> int:
    """
    Delete blobs whose metadata is gone (or was never committed).

    Cleanup is best-effort: a failure is logged and the remaining refs are
    still attempted. Returns how many blobs were actually removed.
    """
    released = 0
    for blob_ref in blob_refs:
        try:
            if await blob_store.delete(blob_ref):
                released += 1
            else:
                logger.warning("Blob %s was already gone", blob_ref)
        except Exception:
            logger.warning("Could not release blob %s", blob_ref, exc_info=True)
    return released
