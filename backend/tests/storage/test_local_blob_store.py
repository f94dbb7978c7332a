import logging

import pytest

from shared.exceptions import StorageUnavailableError
from storage.application.services import put_blob, release_blobs
from storage.infrastructure.local_blob_store import LocalBlobStore


async def test_put_and_delete(blob_store):
    ref = await blob_store.put(b"hello", content_type="application/pdf")
    assert ref.endswith(".pdf")
    assert (blob_store.root / ref).read_bytes() == b"hello"

    assert await blob_store.delete(ref) is True
    assert await blob_store.delete(ref) is False


async def test_refs_are_unique(blob_store):
    first = await blob_store.put(b"same")
    second = await blob_store.put(b"same")
    assert first != second


def test_url_for(tmp_path):
    store = LocalBlobStore(tmp_path, public_base_url="https://cdn.example.com/files/")
    assert store.url_for("2026/01/02/abc.pdf") == "https://cdn.example.com/files/2026/01/02/abc.pdf"


async def test_path_traversal_rejected(blob_store):
    with pytest.raises(ValueError):
        await blob_store.delete("../../etc/passwd")


async def test_unwritable_root(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("file")
    store = LocalBlobStore(blocker)
    with pytest.raises(StorageUnavailableError):
        await put_blob(store, b"data")


async def test_release_blobs_is_best_effort(blob_store, caplog):
    kept = await blob_store.put(b"a")
    with caplog.at_level(logging.WARNING):
        released = await release_blobs(blob_store, ["missing/blob.pdf", "../escape", kept])
    assert released == 1
    assert not (blob_store.root / kept).exists()
    assert "already gone" in caplog.text
    assert "Could not release" in caplog.text
