from __future__ import annotations

from typing import Any

from jose import jwt

from app.core.config import get_settings


def decode_token(token: str) -> dict[str, Any]:
    """Verify a bearer token issued by the auth service and return its claims.

    Raises ``jose.JWTError`` when the signature, algorithm or expiry is invalid.
    """
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
