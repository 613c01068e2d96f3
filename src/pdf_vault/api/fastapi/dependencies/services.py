from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from pdf_vault.auth.gate import AuthGate
from pdf_vault.documents.service import DocumentService


def get_document_service(request: Request) -> DocumentService:
    service = getattr(request.app.state, "document_service", None)
    if service is None:
        raise RuntimeError("Document service not initialized. Is the app lifespan running?")
    return service


def get_auth_gate(request: Request) -> AuthGate:
    return request.app.state.auth_gate


DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
AuthGateDep = Annotated[AuthGate, Depends(get_auth_gate)]
