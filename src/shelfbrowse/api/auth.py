"""Bearer token authentication for the browse API."""

from __future__ import annotations

from typing import Any

from fastapi import Depends, HTTPException, Request
from jose import JWTError, jwt

from shelfbrowse.api.deps import get_settings
from shelfbrowse.config.settings import Settings
from shelfbrowse.observability.logging import get_logger

logger = get_logger(__name__)

JWT_ALGORITHM = "HS256"


class AuthenticationError(ValueError):
    """Raised when an Authorization header does not carry a usable token."""


def get_bearer_token(authorization: str) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Runs of whitespace are collapsed before splitting.

    Raises:
        AuthenticationError: If the header is malformed or the token is
            the literal ``undefined`` some clients send.
    """
    components = authorization.split()

    if len(components) != 2 or components[0] != "Bearer":
        raise AuthenticationError(f"invalid Authorization header: [{authorization}]")

    token = components[1]
    if token == "undefined":
        raise AuthenticationError("bearer token is undefined")

    return token


def validate_token(token: str, key: str) -> dict[str, Any]:
    """Decode and verify a signed token.

    Raises:
        AuthenticationError: If no key is configured, or the signature or
            claims are invalid.
    """
    if not key:
        raise AuthenticationError("no signing key configured")

    try:
        return jwt.decode(token, key, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError(str(e)) from e


async def authenticate(request: Request, settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """FastAPI dependency guarding the browse endpoint.

    Returns the token claims. Without a configured ``jwt_key`` no token can
    validate, so every request is rejected.
    """
    try:
        token = get_bearer_token(request.headers.get("Authorization", ""))
        claims = validate_token(token, settings.jwt_key)
    except AuthenticationError as e:
        logger.warning("Authentication failed", error=str(e))
        raise HTTPException(status_code=401, detail="Unauthorized") from e

    return claims
