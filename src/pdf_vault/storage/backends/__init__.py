from .memory import MemoryBlobStore

__all__ = ["MemoryBlobStore"]
