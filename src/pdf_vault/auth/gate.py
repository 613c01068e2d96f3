"""Admin credential issuing and verification.

The service has exactly one administrator, configured through
``AUTH_ADMIN_EMAIL`` / ``AUTH_ADMIN_PASSWORD``. A successful login yields an
HS256 JWT carrying ``role=admin``; there is no refresh flow, the admin logs in
again once the token expires.
"""

from __future__ import annotations

import hmac
import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from pdf_vault.exceptions import InvalidCredentialsError, Unauthorized

from .settings import AuthSettings

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token part of ``Bearer <token>``, or None when malformed."""
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1]


class AuthGate:
    def __init__(
        self,
        *,
        secret: str,
        admin_email: str,
        admin_password: str,
        lifetime: timedelta = timedelta(hours=12),
        algorithm: str = "HS256",
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self._admin_email = admin_email
        self._admin_password = admin_password
        self._lifetime = lifetime
        self._algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: AuthSettings) -> "AuthGate":
        return cls(
            secret=settings.jwt_secret.get_secret_value(),
            admin_email=settings.admin_email,
            admin_password=settings.admin_password.get_secret_value(),
            lifetime=timedelta(seconds=settings.token_lifetime_seconds),
            algorithm=settings.jwt_algorithm,
        )

    def _credentials_match(self, email: str, password: str) -> bool:
        if not self._admin_email or not self._admin_password:
            return False
        email_ok = hmac.compare_digest(email.encode(), self._admin_email.encode())
        password_ok = hmac.compare_digest(password.encode(), self._admin_password.encode())
        return email_ok and password_ok

    def issue_token(self, email: str, password: str, *, now: datetime | None = None) -> str:
        if not self._credentials_match(email or "", password or ""):
            logger.warning("Rejected admin login for %r", email)
            raise InvalidCredentialsError()
        issued = now or datetime.now(timezone.utc)
        claims = {
            "role": ADMIN_ROLE,
            "email": email,
            "iat": issued,
            "exp": issued + self._lifetime,
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify_token(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp"]},
            )
        except jwt.PyJWTError as exc:
            # expired, bad signature, garbage: all look the same to the caller
            logger.debug("Token rejected: %s", exc)
            raise Unauthorized("Invalid token") from exc
        if payload.get("role") != ADMIN_ROLE:
            raise Unauthorized("Invalid token")
        return payload

    def verify(self, authorization: str | None) -> dict[str, Any]:
        """Check a raw ``Authorization`` header value and return the token claims."""
        if not authorization:
            raise Unauthorized("Missing Authorization header")
        token = extract_bearer_token(authorization)
        if token is None:
            raise Unauthorized("Invalid token")
        return self.verify_token(token)


__all__ = ["ADMIN_ROLE", "AuthGate", "extract_bearer_token"]
