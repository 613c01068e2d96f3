from __future__ import annotations

import logging
from typing import Any, Mapping

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from pdf_vault.exceptions import NotFoundError

from .catalog import Counter, DocumentCatalog, validate_counter, validate_new, validate_update
from .models import Document, NewDocument, utcnow

logger = logging.getLogger(__name__)

# deletingAt missing or null
LIVE: dict[str, Any] = {"deletingAt": None}


def _object_id(document_id: str) -> ObjectId:
    try:
        return ObjectId(document_id)
    except (InvalidId, TypeError):
        # an id that can't be an ObjectId can't exist either
        raise NotFoundError() from None


def _blob_ref(blob_ref: str) -> Any:
    return ObjectId(blob_ref) if ObjectId.is_valid(blob_ref) else blob_ref


class MongoDocumentCatalog(DocumentCatalog):
    def __init__(self, db: AsyncDatabase, *, collection: str = "pdfs"):
        self._db = db
        self._collection = db[collection]

    async def ensure_indexes(self) -> None:
        await self._collection.create_index([("createdAt", DESCENDING)], name="createdAt_desc")
        await self._collection.create_index("fileId", name="fileId")

    async def create(self, new: NewDocument) -> Document:
        new = validate_new(new)
        raw: dict[str, Any] = {
            "title": new.title,
            "description": new.description,
            "fileId": _blob_ref(new.blob_ref),
            "filename": new.filename,
            "contentType": new.content_type,
            "views": 0,
            "downloads": 0,
            "createdAt": utcnow(),
            "archived": False,
        }
        result = await self._collection.insert_one(raw)
        raw["_id"] = result.inserted_id
        return Document.from_mongo(raw)

    async def find_by_id(self, document_id: str) -> Document:
        raw = await self._collection.find_one({"_id": _object_id(document_id), **LIVE})
        if raw is None:
            raise NotFoundError()
        return Document.from_mongo(raw)

    async def _find_and_update(self, document_id: str, update: dict[str, Any]) -> Document:
        raw = await self._collection.find_one_and_update(
            {"_id": _object_id(document_id), **LIVE},
            update,
            return_document=ReturnDocument.AFTER,
        )
        if raw is None:
            raise NotFoundError()
        return Document.from_mongo(raw)

    async def update_by_id(self, document_id: str, fields: Mapping[str, Any]) -> Document:
        changes = validate_update(fields)
        return await self._find_and_update(document_id, {"$set": changes})

    async def increment(self, document_id: str, field: Counter) -> Document:
        validate_counter(field)
        return await self._find_and_update(document_id, {"$inc": {field: 1}})

    async def delete_by_id(self, document_id: str) -> None:
        result = await self._collection.delete_one({"_id": _object_id(document_id)})
        if result.deleted_count == 0:
            raise NotFoundError()

    async def list_all(self) -> list[Document]:
        cursor = self._collection.find(LIVE).sort("createdAt", DESCENDING)
        return [Document.from_mongo(raw) async for raw in cursor]

    async def mark_deleting(self, document_id: str) -> Document:
        return await self._find_and_update(document_id, {"$set": {"deletingAt": utcnow()}})

    async def clear_deleting(self, document_id: str) -> None:
        result = await self._collection.update_one(
            {"_id": _object_id(document_id)}, {"$unset": {"deletingAt": ""}}
        )
        if result.matched_count == 0:
            raise NotFoundError()

    async def list_deleting(self) -> list[Document]:
        cursor = self._collection.find({"deletingAt": {"$ne": None}})
        return [Document.from_mongo(raw) async for raw in cursor]

    async def referenced_blob_ids(self) -> set[str]:
        return {str(ref) for ref in await self._collection.distinct("fileId")}

    async def ping(self) -> bool:
        try:
            await self._db.command("ping")
            return True
        except Exception:
            logger.warning("Catalog ping failed", exc_info=True)
            return False
