from __future__ import annotations

from fastapi import APIRouter, Response, status

from ..dependencies import DocumentServiceDep

ROUTER_PREFIX = "/api"
ROUTER_TAG = "health"

router = APIRouter()


@router.get("/health")
async def health() -> dict:
    return {"ok": True}


@router.get("/_db/health", include_in_schema=False)
async def db_health(service: DocumentServiceDep) -> Response:
    ok = await service.catalog.ping()
    return Response(status_code=status.HTTP_200_OK if ok else status.HTTP_503_SERVICE_UNAVAILABLE)
