"""Document models.

``Document`` is the catalog record for one uploaded PDF. Attributes are
snake_case in Python and camelCase on the wire and in Mongo, matching the
records written by earlier versions of the service.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_CONTENT_TYPE = "application/pdf"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    # records written without tz_aware come back naive but are UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class Document(BaseModel):
    """Catalog record describing one uploaded PDF and referencing its blob."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Document ID")
    title: str = Field(..., description="Display title")
    description: str = Field("", description="Free-text description")
    blob_ref: str = Field(..., description="Blob store identifier of the file content")
    filename: str = Field(..., description="Original filename")
    content_type: str = Field(DEFAULT_CONTENT_TYPE, description="MIME type")
    views: int = Field(0, ge=0, description="Inline view count")
    downloads: int = Field(0, ge=0, description="Download count")
    created_at: datetime = Field(..., description="Upload timestamp (UTC)")
    archived: bool = Field(False, description="Archived by an administrator")
    deleting_at: Optional[datetime] = Field(None, exclude=True)

    @property
    def is_deleting(self) -> bool:
        return self.deleting_at is not None

    def age(self, now: datetime | None = None) -> timedelta:
        return (now or utcnow()) - _aware(self.created_at)

    def as_public(self, *, now: datetime | None = None, auto_archive_after: timedelta | None = None) -> "Document":
        """Copy for list output, archived when older than ``auto_archive_after``.

        Presentation only: the stored flag is never changed here.
        """
        if auto_archive_after is not None and not self.archived and self.age(now) > auto_archive_after:
            return self.model_copy(update={"archived": True})
        return self

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_mongo(cls, raw: dict[str, Any]) -> "Document":
        return cls(
            id=str(raw["_id"]),
            title=raw["title"],
            description=raw.get("description") or "",
            blob_ref=str(raw["fileId"]),
            filename=raw["filename"],
            content_type=raw.get("contentType") or DEFAULT_CONTENT_TYPE,
            views=raw.get("views", 0),
            downloads=raw.get("downloads", 0),
            created_at=_aware(raw["createdAt"]),
            archived=bool(raw.get("archived", False)),
            deleting_at=raw.get("deletingAt"),
        )


@dataclass
class NewDocument:
    """Fields supplied when registering a freshly ingested blob."""

    title: str
    blob_ref: str
    filename: str
    description: str = ""
    content_type: str = DEFAULT_CONTENT_TYPE


__all__ = ["DEFAULT_CONTENT_TYPE", "Document", "NewDocument", "utcnow"]
