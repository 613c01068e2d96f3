"""Document lifecycle: catalog records, their blobs, and the service tying them together."""

from .catalog import DocumentCatalog, InMemoryDocumentCatalog
from .disposition import content_disposition, ensure_extension
from .models import Document, NewDocument
from .service import Delivery, DocumentService, ReconcileReport

__all__ = [
    "Delivery",
    "Document",
    "DocumentCatalog",
    "DocumentService",
    "InMemoryDocumentCatalog",
    "NewDocument",
    "ReconcileReport",
    "content_disposition",
    "ensure_extension",
]
