"""Bearer-token checks for the mutating routes.

Tokens are HS256 JWTs signed with FONTSHELF_AUTH_SECRET. When no secret is
configured every request is accepted.
"""

from __future__ import annotations

import logging
from http.server import BaseHTTPRequestHandler
from typing import Any

import jwt

from fontshelf.config import Settings
from fontshelf.exceptions import AuthError

logger = logging.getLogger("fontshelf.auth")


def verify_token(token: str, secret: str) -> dict[str, Any] | None:
    """Verify a session JWT and return its claims, or None if invalid."""
    try:
        return jwt.decode(token, secret, algorithms=["HS256"], options={"verify_aud": False})
    except jwt.ExpiredSignatureError:
        logger.debug("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug("Invalid token: %s", e)
        return None


def get_bearer_token(handler: BaseHTTPRequestHandler) -> str | None:
    """Extract Bearer token from Authorization header."""
    auth = handler.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:]
    return None


def is_auth_enabled(settings: Settings) -> bool:
    return bool(settings.auth_secret)


def require_auth(handler: BaseHTTPRequestHandler, settings: Settings) -> dict[str, Any] | None:
    """Raise AuthError unless the request carries a valid token (when auth is on)."""
    if not is_auth_enabled(settings):
        return None
    token = get_bearer_token(handler)
    if not token:
        raise AuthError("Authorization required")
    claims = verify_token(token, settings.auth_secret)
    if claims is None:
        raise AuthError("Invalid or expired token")
    return claims
