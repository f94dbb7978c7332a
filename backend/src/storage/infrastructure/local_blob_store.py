import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from shared.exceptions import StorageUnavailableError

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "application/pdf": ".pdf",
    "application/msword": ".doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    "image/jpeg": ".jpg",
}


class LocalBlobStore:
    """Blob store on the local filesystem. Keys look like ``2026/10/18/<hex>.pdf``."""

    def __init__(self, root: str | Path, public_base_url: str = "/files"):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    async def put(self, data: bytes, *, content_type: str | None = None) -> str:
        today = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        key = f"{today}/{uuid.uuid4().hex}{_EXTENSIONS.get(content_type or '', '')}"
        try:
            await asyncio.to_thread(self._write, key, data)
        except OSError as exc:
            raise StorageUnavailableError(f"Could not store blob: {exc}") from exc
        return key

    async def delete(self, blob_ref: str) -> bool:
        try:
            return await asyncio.to_thread(self._unlink, blob_ref)
        except OSError as exc:
            raise StorageUnavailableError(f"Could not delete blob {blob_ref}: {exc}") from exc

    def url_for(self, blob_ref: str) -> str:
        return f"{self.public_base_url}/{blob_ref}"

    def _path(self, key: str) -> Path:
        safe_key = key.lstrip("/").replace("\\", "/")
        if ".." in safe_key.split("/"):
            raise ValueError(f"Invalid blob key: {key!r}")
        return self.root / safe_key

    def _write(self, key: str, data: bytes) -> None:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    def _unlink(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True
