"""Blob storage contract.

A blob is the raw bytes of one uploaded file plus the filename and content
type needed to stream it back. Blobs are addressed by an opaque string id
generated by the backend at ingest time.

Writes and reads are streamed: ``ingest`` consumes an async iterator of byte
chunks and ``retrieve`` hands back a ``BlobStream`` that yields chunks, so a
50 MiB upload never has to sit in memory as one ``bytes`` object.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, Awaitable, Callable, Optional

from pdf_vault.exceptions import PayloadTooLargeError

logger = logging.getLogger(__name__)

MIB = 1024 * 1024
DEFAULT_MAX_BYTES = 50 * MIB
DEFAULT_CONTENT_TYPE = "application/pdf"

ByteStream = AsyncIterable[bytes]


@dataclass(frozen=True)
class BlobInfo:
    id: str
    filename: str
    content_type: str
    length: int


class BlobStream:
    """An opened blob. Iterate it for chunks; always ``aclose()`` when done."""

    def __init__(
        self,
        info: BlobInfo,
        chunks: AsyncIterator[bytes],
        on_close: Optional[Callable[[], Awaitable[None]]] = None,
    ):
        self.info = info
        self._chunks = chunks
        self._on_close = on_close
        self._closed = False

    @property
    def filename(self) -> str:
        return self.info.filename

    @property
    def content_type(self) -> str:
        return self.info.content_type

    @property
    def length(self) -> int:
        return self.info.length

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._chunks:
                if chunk:
                    yield chunk
        finally:
            await self.aclose()

    async def read(self) -> bytes:
        """Drain the whole blob. Convenient for tests and small files only."""
        return b"".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            await self._on_close()


async def limit_stream(stream: ByteStream, max_bytes: int) -> AsyncIterator[bytes]:
    """Pass chunks through, raising PayloadTooLargeError once ``max_bytes`` is exceeded."""
    total = 0
    async for chunk in stream:
        total += len(chunk)
        if total > max_bytes:
            raise PayloadTooLargeError(limit=max_bytes)
        yield chunk


class BlobStore(ABC):
    def __init__(self, *, max_bytes: int = DEFAULT_MAX_BYTES):
        self.max_bytes = max_bytes

    @abstractmethod
    async def ingest(self, stream: ByteStream, filename: str, content_type: str = DEFAULT_CONTENT_TYPE) -> BlobInfo:
        """Persist ``stream`` as one blob and return its info once fully written.

        Raises PayloadTooLargeError past ``max_bytes`` and StorageWriteError on
        any backend failure. In both cases no blob id is registered.
        """

    @abstractmethod
    async def retrieve(self, blob_id: str) -> BlobStream:
        """Open a blob for streaming. Raises NotFoundError if absent."""

    @abstractmethod
    async def delete(self, blob_id: str, *, missing_ok: bool = False) -> None:
        """Remove a blob. Raises NotFoundError if absent unless ``missing_ok``."""

    @abstractmethod
    def iter_ids(self) -> AsyncIterator[str]:
        """Yield the id of every stored blob."""


__all__ = [
    "DEFAULT_MAX_BYTES",
    "DEFAULT_CONTENT_TYPE",
    "ByteStream",
    "BlobInfo",
    "BlobStream",
    "BlobStore",
    "limit_stream",
]
