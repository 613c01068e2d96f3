"""Administrator routes: login, upload, delete, archive, unarchive."""

from __future__ import annotations

from typing import AsyncIterator, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from starlette.datastructures import UploadFile

from ..dependencies import AuthGateDep, DocumentServiceDep, require_admin

ROUTER_PREFIX = "/api/admin"
ROUTER_TAG = "admin"

UPLOAD_FIELD = "pdf"
UPLOAD_READ_SIZE = 1024 * 1024

router = APIRouter()


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class LoginResponse(BaseModel):
    token: str


async def iter_upload(file: UploadFile, chunk_size: int = UPLOAD_READ_SIZE) -> AsyncIterator[bytes]:
    """Read a spooled multipart file in chunks instead of all at once."""
    while True:
        chunk = await file.read(chunk_size)
        if not chunk:
            break
        yield chunk


def _text_field(value) -> Optional[str]:
    return value if isinstance(value, str) else None


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, gate: AuthGateDep) -> LoginResponse:
    return LoginResponse(token=gate.issue_token(body.email, body.password))


@router.post("/upload", dependencies=[Depends(require_admin)])
async def upload(request: Request, service: DocumentServiceDep) -> dict:
    """Upload a PDF (multipart field ``pdf``) with ``title`` and optional ``description``.

    The form is parsed only after the admin token has been checked, so
    anonymous uploads are refused before their body is spooled.
    """
    async with request.form(max_files=1) as form:
        file = form.get(UPLOAD_FIELD)
        if not isinstance(file, UploadFile):
            file = None
        doc = await service.upload(
            title=_text_field(form.get("title")),
            description=_text_field(form.get("description")),
            stream=iter_upload(file) if file is not None else None,
            filename=file.filename if file is not None else None,
            content_type=file.content_type if file is not None else None,
        )
    return {"message": "Uploaded", "pdf": doc.to_json()}


@router.delete("/{document_id}", dependencies=[Depends(require_admin)])
async def delete_document(document_id: str, service: DocumentServiceDep) -> dict:
    await service.delete(document_id)
    return {"message": "Deleted"}


@router.patch("/{document_id}/archive", dependencies=[Depends(require_admin)])
async def archive_document(document_id: str, service: DocumentServiceDep) -> dict:
    doc = await service.archive(document_id)
    return {"message": "Archived", "pdf": doc.to_json()}


@router.patch("/{document_id}/unarchive", dependencies=[Depends(require_admin)])
async def unarchive_document(document_id: str, service: DocumentServiceDep) -> dict:
    doc = await service.unarchive(document_id)
    return {"message": "Unarchived", "pdf": doc.to_json()}
