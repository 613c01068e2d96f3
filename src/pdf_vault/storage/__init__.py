from .backends.memory import MemoryBlobStore
from .base import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_MAX_BYTES,
    BlobInfo,
    BlobStore,
    BlobStream,
    ByteStream,
    limit_stream,
)

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "DEFAULT_MAX_BYTES",
    "BlobInfo",
    "BlobStore",
    "BlobStream",
    "ByteStream",
    "MemoryBlobStore",
    "limit_stream",
]
