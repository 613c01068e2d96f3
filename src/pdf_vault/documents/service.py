"""Document lifecycle on top of a BlobStore and a DocumentCatalog.

The two stores fail independently and share no transaction, so every
multi-step operation here is ordered to leave a recoverable state:

- upload: blob first, then record. A failed record insert deletes the blob
  it just wrote, including when the upload task is cancelled
  mid-insert.
- delete: tombstone the record, delete the blob, then hard-delete the
  record. A crash in between leaves a hidden, tombstoned record that
  ``reconcile`` finishes off.

Inconsistencies that need an operator go to the ``pdf_vault.reconcile``
logger.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Literal, Optional

from pdf_vault.app.core.logging import RECONCILE_LOGGER
from pdf_vault.exceptions import ValidationError
from pdf_vault.storage.base import DEFAULT_CONTENT_TYPE, BlobStore, BlobStream, ByteStream

from .catalog import DocumentCatalog
from .disposition import content_disposition, ensure_extension
from .models import Document, NewDocument

logger = logging.getLogger(__name__)
reconcile_logger = logging.getLogger(RECONCILE_LOGGER)

DEFAULT_AUTO_ARCHIVE_AFTER = timedelta(days=30)


@dataclass
class Delivery:
    """A document ready to be streamed back to a client."""

    document: Document
    blob: BlobStream
    disposition: str

    @property
    def media_type(self) -> str:
        return self.document.content_type or self.blob.content_type

    @property
    def length(self) -> int:
        return self.blob.length


@dataclass
class ReconcileReport:
    finished_deletes: list[str] = field(default_factory=list)
    failed_deletes: list[str] = field(default_factory=list)
    orphan_blobs: list[str] = field(default_factory=list)
    purged_blobs: list[str] = field(default_factory=list)

    @property
    def clean(self) -> bool:
        return not (self.failed_deletes or (set(self.orphan_blobs) - set(self.purged_blobs)))


class DocumentService:
    def __init__(
        self,
        blobs: BlobStore,
        catalog: DocumentCatalog,
        *,
        auto_archive_after: timedelta = DEFAULT_AUTO_ARCHIVE_AFTER,
    ):
        self.blobs = blobs
        self.catalog = catalog
        self.auto_archive_after = auto_archive_after

    # ------------------------------------------------------------------ admin

    async def upload(
        self,
        *,
        title: Optional[str],
        stream: Optional[ByteStream],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Document:
        if stream is None:
            raise ValidationError("No file uploaded")
        if not (title or "").strip():
            raise ValidationError("Title is required")

        filename = filename or f"{int(time.time() * 1000)}.pdf"
        info = await self.blobs.ingest(stream, filename, content_type or DEFAULT_CONTENT_TYPE)

        try:
            doc = await self.catalog.create(
                NewDocument(
                    title=title,
                    description=description or "",
                    blob_ref=info.id,
                    filename=info.filename,
                    content_type=info.content_type,
                )
            )
        except (Exception, asyncio.CancelledError):
            logger.error("Registering blob %s failed; discarding it", info.id, extra={"blob_id": info.id})
            await asyncio.shield(self._discard_blob(info.id))
            raise

        logger.info("Uploaded %s (%d bytes) as %s", doc.filename, info.length, doc.id, extra={"document_id": doc.id})
        return doc

    async def _discard_blob(self, blob_id: str) -> None:
        try:
            await self.blobs.delete(blob_id, missing_ok=True)
        except Exception:
            reconcile_logger.error(
                "Orphaned blob %s: record creation failed and the blob could not be removed",
                blob_id,
                exc_info=True,
                extra={"blob_id": blob_id},
            )

    async def delete(self, document_id: str) -> None:
        doc = await self.catalog.mark_deleting(document_id)

        try:
            await self.blobs.delete(doc.blob_ref, missing_ok=True)
        except Exception:
            logger.error("Deleting blob %s of %s failed", doc.blob_ref, doc.id, extra={"document_id": doc.id})
            try:
                await self.catalog.clear_deleting(doc.id)
            except Exception:
                reconcile_logger.error(
                    "Document %s left tombstoned after its blob delete failed",
                    doc.id,
                    exc_info=True,
                    extra={"document_id": doc.id, "blob_id": doc.blob_ref},
                )
            raise

        try:
            await self.catalog.delete_by_id(doc.id)
        except Exception:
            reconcile_logger.error(
                "Blob %s deleted but record %s could not be removed; tombstone kept for reconcile",
                doc.blob_ref,
                doc.id,
                exc_info=True,
                extra={"document_id": doc.id, "blob_id": doc.blob_ref},
            )
            raise

        logger.info("Deleted %s", doc.id, extra={"document_id": doc.id})

    async def set_archived(self, document_id: str, archived: bool) -> Document:
        return await self.catalog.update_by_id(document_id, {"archived": archived})

    async def archive(self, document_id: str) -> Document:
        return await self.set_archived(document_id, True)

    async def unarchive(self, document_id: str) -> Document:
        return await self.set_archived(document_id, False)

    # ----------------------------------------------------------------- public

    async def list_public(self, *, now: datetime | None = None) -> list[Document]:
        # The age override is display-only; un-archiving an old document
        # does not stop it showing as archived here.
        docs = await self.catalog.list_all()
        return [d.as_public(now=now, auto_archive_after=self.auto_archive_after) for d in docs]

    async def get(self, document_id: str) -> Document:
        return await self.catalog.find_by_id(document_id)

    async def _deliver(self, document_id: str, counter: Literal["views", "downloads"]) -> tuple[Document, BlobStream]:
        doc = await self.catalog.increment(document_id, counter)
        # a concurrent delete can remove the blob between these two calls;
        # the caller then sees NotFoundError
        blob = await self.blobs.retrieve(doc.blob_ref)
        return doc, blob

    async def view(self, document_id: str) -> Delivery:
        doc, blob = await self._deliver(document_id, "views")
        return Delivery(doc, blob, content_disposition("inline", doc.filename))

    async def download(self, document_id: str) -> Delivery:
        doc, blob = await self._deliver(document_id, "downloads")
        return Delivery(doc, blob, content_disposition("attachment", ensure_extension(doc.filename)))

    # ------------------------------------------------------------- operations

    async def reconcile(self, *, purge_orphans: bool = False) -> ReconcileReport:
        """Finish interrupted deletes and find blobs no record points at."""
        report = ReconcileReport()

        for doc in await self.catalog.list_deleting():
            try:
                await self.blobs.delete(doc.blob_ref, missing_ok=True)
                await self.catalog.delete_by_id(doc.id)
            except Exception:
                reconcile_logger.error("Could not finish delete of %s", doc.id, exc_info=True,
                                       extra={"document_id": doc.id})
                report.failed_deletes.append(doc.id)
            else:
                report.finished_deletes.append(doc.id)

        referenced = await self.catalog.referenced_blob_ids()
        async for blob_id in self.blobs.iter_ids():
            if blob_id in referenced:
                continue
            report.orphan_blobs.append(blob_id)
            if purge_orphans:
                try:
                    await self.blobs.delete(blob_id, missing_ok=True)
                except Exception:
                    reconcile_logger.error("Could not purge orphan blob %s", blob_id, exc_info=True,
                                           extra={"blob_id": blob_id})
                else:
                    report.purged_blobs.append(blob_id)

        logger.info(
            "Reconcile: %d deletes finished, %d failed, %d orphan blobs (%d purged)",
            len(report.finished_deletes),
            len(report.failed_deletes),
            len(report.orphan_blobs),
            len(report.purged_blobs),
        )
        return report


__all__ = ["Delivery", "DocumentService", "ReconcileReport", "DEFAULT_AUTO_ARCHIVE_AFTER"]
