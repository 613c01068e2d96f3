"""Unit tests for MemoryBlobStore and the streaming helpers in storage.base."""

import pytest

from pdf_vault.exceptions import NotFoundError, PayloadTooLargeError, StorageWriteError
from pdf_vault.storage.backends.memory import MemoryBlobStore
from pdf_vault.storage.base import BlobInfo, BlobStream, limit_stream
from tests.helpers import PDF_BYTES, byte_stream, failing_stream


@pytest.mark.asyncio
class TestMemoryBlobStore:
    async def test_ingest_and_retrieve(self):
        """Retrieved bytes are identical to what was ingested."""
        store = MemoryBlobStore(chunk_size=512)

        info = await store.ingest(byte_stream(PDF_BYTES), "report.pdf", "application/pdf")

        assert info.length == len(PDF_BYTES)
        assert info.filename == "report.pdf"
        assert info.content_type == "application/pdf"
        assert info.id in store

        blob = await store.retrieve(info.id)
        assert blob.length == len(PDF_BYTES)
        assert blob.filename == "report.pdf"
        assert await blob.read() == PDF_BYTES

    async def test_retrieve_streams_in_chunks(self):
        store = MemoryBlobStore(chunk_size=100)
        info = await store.ingest(byte_stream(b"x" * 250), "a.pdf")

        blob = await store.retrieve(info.id)
        sizes = [len(chunk) async for chunk in blob]

        assert sizes == [100, 100, 50]

    async def test_ids_are_unique(self):
        store = MemoryBlobStore()
        first = await store.ingest(byte_stream(b"same"), "a.pdf")
        second = await store.ingest(byte_stream(b"same"), "a.pdf")

        assert first.id != second.id
        assert len(store) == 2

    async def test_empty_file(self):
        store = MemoryBlobStore()
        info = await store.ingest(byte_stream(b""), "empty.pdf")

        assert info.length == 0
        assert await (await store.retrieve(info.id)).read() == b""

    async def test_retrieve_missing(self):
        store = MemoryBlobStore()

        with pytest.raises(NotFoundError) as exc_info:
            await store.retrieve("does-not-exist")

        assert "not found" in str(exc_info.value).lower()

    async def test_oversized_ingest_leaves_nothing(self):
        """Past max_bytes the ingest fails and no blob is registered."""
        store = MemoryBlobStore(max_bytes=1000)

        with pytest.raises(PayloadTooLargeError) as exc_info:
            await store.ingest(byte_stream(b"x" * 1001, chunk_size=300), "big.pdf")

        assert exc_info.value.status_code == 413
        assert exc_info.value.limit == 1000
        assert len(store) == 0

    async def test_exactly_max_bytes_is_accepted(self):
        store = MemoryBlobStore(max_bytes=1000)
        info = await store.ingest(byte_stream(b"x" * 1000), "edge.pdf")

        assert info.length == 1000

    async def test_broken_stream_is_a_write_error(self):
        store = MemoryBlobStore()

        with pytest.raises(StorageWriteError):
            await store.ingest(failing_stream(b"partial", ConnectionResetError("client went away")), "a.pdf")

        assert len(store) == 0

    async def test_delete(self):
        store = MemoryBlobStore()
        info = await store.ingest(byte_stream(b"data"), "a.pdf")

        await store.delete(info.id)

        assert info.id not in store
        with pytest.raises(NotFoundError):
            await store.retrieve(info.id)

    async def test_delete_missing(self):
        store = MemoryBlobStore()

        with pytest.raises(NotFoundError):
            await store.delete("nope")

        # no error when absence is acceptable
        await store.delete("nope", missing_ok=True)

    async def test_iter_ids(self):
        store = MemoryBlobStore()
        a = await store.ingest(byte_stream(b"a"), "a.pdf")
        b = await store.ingest(byte_stream(b"b"), "b.pdf")

        ids = [blob_id async for blob_id in store.iter_ids()]

        assert sorted(ids) == sorted([a.id, b.id])


@pytest.mark.asyncio
class TestStreamingHelpers:
    async def test_limit_stream_passes_through(self):
        chunks = [chunk async for chunk in limit_stream(byte_stream(b"abcdef", chunk_size=2), 6)]

        assert chunks == [b"ab", b"cd", b"ef"]

    async def test_limit_stream_raises_past_limit(self):
        seen = []
        with pytest.raises(PayloadTooLargeError):
            async for chunk in limit_stream(byte_stream(b"abcdef", chunk_size=2), 5):
                seen.append(chunk)

        assert seen == [b"ab", b"cd"]

    async def test_blob_stream_skips_empty_chunks_and_closes(self):
        closed = []

        async def chunks():
            yield b"a"
            yield b""
            yield b"b"

        async def on_close():
            closed.append(True)

        stream = BlobStream(BlobInfo("id", "f.pdf", "application/pdf", 2), chunks(), on_close=on_close)

        assert [c async for c in stream] == [b"a", b"b"]
        assert closed == [True]

        # closing twice runs the callback once
        await stream.aclose()
        assert closed == [True]
