"""Public routes: list, inline view, download. No credential required."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from pdf_vault.documents.service import Delivery

from ..dependencies import DocumentServiceDep
from ..middleware.errors import plain_text_errors

ROUTER_PREFIX = "/api/public"
ROUTER_TAG = "public"

router = APIRouter()


def stream_delivery(delivery: Delivery) -> StreamingResponse:
    return StreamingResponse(
        delivery.blob,
        media_type=delivery.media_type,
        headers={
            "Content-Disposition": delivery.disposition,
            "Content-Length": str(delivery.length),
        },
    )


@router.get("/list")
async def list_documents(service: DocumentServiceDep) -> list[dict]:
    return [doc.to_json() for doc in await service.list_public()]


@router.get("/view/{document_id}", dependencies=[Depends(plain_text_errors)], response_class=StreamingResponse)
async def view_document(document_id: str, service: DocumentServiceDep) -> StreamingResponse:
    return stream_delivery(await service.view(document_id))


@router.get("/download/{document_id}", dependencies=[Depends(plain_text_errors)], response_class=StreamingResponse)
async def download_document(document_id: str, service: DocumentServiceDep) -> StreamingResponse:
    return stream_delivery(await service.download(document_id))
