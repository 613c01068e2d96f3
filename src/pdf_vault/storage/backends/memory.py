"""In-process blob store for local development and tests.

Not durable and not shared between processes. Content is held as bytes per
blob, so only use it with small files.
"""

from __future__ import annotations

import logging
from typing import AsyncIterator

from bson import ObjectId

from pdf_vault.exceptions import NotFoundError, PayloadTooLargeError, StorageWriteError

from ..base import DEFAULT_CONTENT_TYPE, DEFAULT_MAX_BYTES, BlobInfo, BlobStore, BlobStream, ByteStream, limit_stream

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class MemoryBlobStore(BlobStore):
    def __init__(self, *, max_bytes: int = DEFAULT_MAX_BYTES, chunk_size: int = CHUNK_SIZE):
        super().__init__(max_bytes=max_bytes)
        self.chunk_size = chunk_size
        self._blobs: dict[str, tuple[BlobInfo, bytes]] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def __contains__(self, blob_id: object) -> bool:
        return blob_id in self._blobs

    async def ingest(self, stream: ByteStream, filename: str, content_type: str = DEFAULT_CONTENT_TYPE) -> BlobInfo:
        parts: list[bytes] = []
        try:
            async for chunk in limit_stream(stream, self.max_bytes):
                parts.append(chunk)
        except PayloadTooLargeError:
            raise
        except Exception as exc:
            logger.error("Blob ingest failed for %s", filename, exc_info=True)
            raise StorageWriteError() from exc

        data = b"".join(parts)
        info = BlobInfo(id=str(ObjectId()), filename=filename, content_type=content_type, length=len(data))
        self._blobs[info.id] = (info, data)
        logger.debug("Stored blob %s (%d bytes)", info.id, info.length)
        return info

    async def retrieve(self, blob_id: str) -> BlobStream:
        try:
            info, data = self._blobs[blob_id]
        except KeyError:
            raise NotFoundError(f"Blob {blob_id} not found") from None

        async def chunks() -> AsyncIterator[bytes]:
            for start in range(0, len(data), self.chunk_size):
                yield data[start:start + self.chunk_size]

        return BlobStream(info, chunks())

    async def delete(self, blob_id: str, *, missing_ok: bool = False) -> None:
        if self._blobs.pop(blob_id, None) is None and not missing_ok:
            raise NotFoundError(f"Blob {blob_id} not found")

    async def iter_ids(self) -> AsyncIterator[str]:
        for blob_id in list(self._blobs):
            yield blob_id
