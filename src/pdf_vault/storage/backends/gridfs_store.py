"""GridFS-backed blob store.

Blobs live in the ``<bucket>.files`` / ``<bucket>.chunks`` collections of the
same database as the catalog. The content type is kept in the file document's
``metadata.contentType`` (the top-level ``contentType`` field is deprecated
by MongoDB but still read for files written by older tooling).
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

from bson import ObjectId
from bson.errors import InvalidId
from gridfs import AsyncGridFSBucket
from gridfs.errors import NoFile
from pymongo.asynchronous.database import AsyncDatabase

from pdf_vault.exceptions import NotFoundError, PayloadTooLargeError, StorageWriteError

from ..base import DEFAULT_CONTENT_TYPE, DEFAULT_MAX_BYTES, BlobInfo, BlobStore, BlobStream, ByteStream, limit_stream

logger = logging.getLogger(__name__)


def _object_id(blob_id: str) -> ObjectId | None:
    try:
        return ObjectId(blob_id)
    except (InvalidId, TypeError):
        return None


class GridFSBlobStore(BlobStore):
    def __init__(
        self,
        db: AsyncDatabase,
        *,
        bucket_name: str = "pdfs",
        max_bytes: int = DEFAULT_MAX_BYTES,
        chunk_size_bytes: int | None = None,
    ):
        super().__init__(max_bytes=max_bytes)
        self.bucket_name = bucket_name
        kwargs: dict[str, Any] = {"bucket_name": bucket_name}
        if chunk_size_bytes:
            kwargs["chunk_size_bytes"] = chunk_size_bytes
        self._bucket = AsyncGridFSBucket(db, **kwargs)
        self._files = db[f"{bucket_name}.files"]

    async def ingest(self, stream: ByteStream, filename: str, content_type: str = DEFAULT_CONTENT_TYPE) -> BlobInfo:
        grid_in = self._bucket.open_upload_stream(filename, metadata={"contentType": content_type})
        length = 0
        try:
            async for chunk in limit_stream(stream, self.max_bytes):
                await grid_in.write(chunk)
                length += len(chunk)
            await grid_in.close()
        except PayloadTooLargeError:
            await self._abort(grid_in)
            raise
        except Exception as exc:
            logger.error("GridFS upload failed for %s", filename, exc_info=True)
            await self._abort(grid_in)
            raise StorageWriteError() from exc

        info = BlobInfo(id=str(grid_in._id), filename=filename, content_type=content_type, length=length)
        logger.debug("Stored blob %s in bucket %s (%d bytes)", info.id, self.bucket_name, length)
        return info

    async def _abort(self, grid_in) -> None:
        # abort() drops any chunks already flushed so no partial file survives
        try:
            await grid_in.abort()
        except Exception:
            logger.error("Could not abort partial GridFS upload %s", grid_in._id, exc_info=True)

    async def retrieve(self, blob_id: str) -> BlobStream:
        oid = _object_id(blob_id)
        if oid is None:
            raise NotFoundError(f"Blob {blob_id} not found")
        try:
            grid_out = await self._bucket.open_download_stream(oid)
        except NoFile:
            raise NotFoundError(f"Blob {blob_id} not found") from None

        metadata = grid_out.metadata or {}
        content_type = metadata.get("contentType") or getattr(grid_out, "content_type", None) or DEFAULT_CONTENT_TYPE
        info = BlobInfo(id=blob_id, filename=grid_out.filename, content_type=content_type, length=grid_out.length)

        async def chunks() -> AsyncIterator[bytes]:
            while True:
                chunk = await grid_out.readchunk()
                if not chunk:
                    break
                yield chunk

        async def close() -> None:
            await grid_out.close()

        return BlobStream(info, chunks(), on_close=close)

    async def delete(self, blob_id: str, *, missing_ok: bool = False) -> None:
        oid = _object_id(blob_id)
        try:
            if oid is None:
                raise NoFile(blob_id)
            await self._bucket.delete(oid)
        except NoFile:
            if missing_ok:
                logger.debug("Blob %s already absent", blob_id)
                return
            raise NotFoundError(f"Blob {blob_id} not found") from None

    async def iter_ids(self) -> AsyncIterator[str]:
        async for doc in self._files.find({}, {"_id": 1}):
            yield str(doc["_id"])
