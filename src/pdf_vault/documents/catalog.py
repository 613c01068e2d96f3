from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Iterable, Literal, Mapping

from bson import ObjectId

from pdf_vault.exceptions import NotFoundError, ValidationError

from .models import Document, NewDocument, utcnow

Counter = Literal["views", "downloads"]
COUNTERS: frozenset[str] = frozenset({"views", "downloads"})
UPDATABLE_FIELDS: frozenset[str] = frozenset({"title", "description", "archived"})


def validate_new(new: NewDocument) -> NewDocument:
    title = (new.title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if not new.blob_ref:
        raise ValidationError("Blob reference is required")
    if not new.filename:
        raise ValidationError("Filename is required")
    new.title = title
    new.description = new.description or ""
    return new


def validate_update(fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    if "title" in fields and not str(fields["title"] or "").strip():
        raise ValidationError("Title is required")
    if "archived" in fields and not isinstance(fields["archived"], bool):
        raise ValidationError("archived must be a boolean")
    return dict(fields)


def validate_counter(field: str) -> str:
    if field not in COUNTERS:
        raise ValidationError(f"Unknown counter: {field}")
    return field


class DocumentCatalog(ABC):
    """Metadata record store for documents.

    Records whose delete is in progress (tombstoned) are invisible to every
    read except ``list_deleting`` and ``referenced_blob_ids``.
    """

    @abstractmethod
    async def create(self, new: NewDocument) -> Document: ...

    @abstractmethod
    async def find_by_id(self, document_id: str) -> Document: ...

    @abstractmethod
    async def update_by_id(self, document_id: str, fields: Mapping[str, Any]) -> Document: ...

    @abstractmethod
    async def increment(self, document_id: str, field: Counter) -> Document:
        """Atomically add one to ``views`` or ``downloads`` and return the updated record."""

    @abstractmethod
    async def delete_by_id(self, document_id: str) -> None: ...

    @abstractmethod
    async def list_all(self) -> list[Document]:
        """Live documents, newest ``created_at`` first."""

    @abstractmethod
    async def mark_deleting(self, document_id: str) -> Document: ...

    @abstractmethod
    async def clear_deleting(self, document_id: str) -> None: ...

    @abstractmethod
    async def list_deleting(self) -> list[Document]: ...

    @abstractmethod
    async def referenced_blob_ids(self) -> set[str]: ...

    async def ping(self) -> bool:
        return True


class InMemoryDocumentCatalog(DocumentCatalog):
    """Dict-backed catalog for local development and tests.

    Every mutation completes without awaiting, so concurrent coroutines on one
    event loop cannot interleave inside an update.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self._docs: dict[str, Document] = {d.id: d for d in documents}

    def __len__(self) -> int:
        return len(self._docs)

    def _live(self, document_id: str) -> Document:
        doc = self._docs.get(document_id)
        if doc is None or doc.is_deleting:
            raise NotFoundError()
        return doc

    async def create(self, new: NewDocument) -> Document:
        new = validate_new(new)
        doc = Document(
            id=str(ObjectId()),
            title=new.title,
            description=new.description,
            blob_ref=new.blob_ref,
            filename=new.filename,
            content_type=new.content_type,
            created_at=utcnow(),
        )
        self._docs[doc.id] = doc
        return doc

    async def find_by_id(self, document_id: str) -> Document:
        return self._live(document_id)

    async def update_by_id(self, document_id: str, fields: Mapping[str, Any]) -> Document:
        changes = validate_update(fields)
        doc = self._live(document_id).model_copy(update=changes)
        self._docs[document_id] = doc
        return doc

    async def increment(self, document_id: str, field: Counter) -> Document:
        validate_counter(field)
        current = self._live(document_id)
        doc = current.model_copy(update={field: getattr(current, field) + 1})
        self._docs[document_id] = doc
        return doc

    async def delete_by_id(self, document_id: str) -> None:
        if self._docs.pop(document_id, None) is None:
            raise NotFoundError()

    async def list_all(self) -> list[Document]:
        live = [d for d in self._docs.values() if not d.is_deleting]
        return sorted(live, key=lambda d: d.created_at, reverse=True)

    async def mark_deleting(self, document_id: str) -> Document:
        doc = self._live(document_id).model_copy(update={"deleting_at": utcnow()})
        self._docs[document_id] = doc
        return doc

    async def clear_deleting(self, document_id: str) -> None:
        doc = self._docs.get(document_id)
        if doc is None:
            raise NotFoundError()
        self._docs[document_id] = doc.model_copy(update={"deleting_at": None})

    async def list_deleting(self) -> list[Document]:
        return [d for d in self._docs.values() if d.is_deleting]

    async def referenced_blob_ids(self) -> set[str]:
        return {d.blob_ref for d in self._docs.values()}
