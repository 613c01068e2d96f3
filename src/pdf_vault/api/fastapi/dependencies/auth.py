from __future__ import annotations

from typing import Annotated, Any, Optional

from fastapi import Header

from .services import AuthGateDep


async def require_admin(
    gate: AuthGateDep,
    authorization: Annotated[Optional[str], Header()] = None,
) -> dict[str, Any]:
    """Admin guard: returns the verified token claims or raises Unauthorized (401)."""
    return gate.verify(authorization)

