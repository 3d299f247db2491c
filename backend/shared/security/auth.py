"""
HS256 JWTs for establishment owners and for the platform console.

Tokens are stateless: no revocation list, a token is good until `exp`.
The `type` claim keeps an owner token out of the console and the other way round.
"""

from __future__ import annotations

import hmac
import time
import uuid
from typing import Any

import jwt
from fastapi import Header

from shared.config.constants import TokenType
from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    settings,
)
from shared.config.logging import get_logger
from shared.utils.exceptions import UnauthorizedError

logger = get_logger(__name__)


def sign_jwt(
    payload: dict[str, Any],
    ttl_seconds: int,
    token_type: str,
) -> str:
    """Sign `payload` plus the standard claims, a fresh `jti` and `type`."""
    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": token_type,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str, expected_type: str) -> dict[str, Any]:
    """Decoded claims, or UnauthorizedError (expired, bad signature, wrong `type`)."""
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expirado")
    except jwt.InvalidTokenError as e:
        # Client only sees a generic message
        logger.warning("JWT validation failed", error=str(e))
        raise UnauthorizedError("Token inválido")

    if "sub" not in payload:
        raise UnauthorizedError("Token inválido: claim 'sub' ausente")

    if payload.get("type") != expected_type:
        raise UnauthorizedError("Tipo de token inválido", token_type=payload.get("type"))

    return payload


def get_bearer_token(authorization: str | None) -> str:
    """"Bearer <token>" -> token."""
    if not authorization:
        raise UnauthorizedError("Cabeçalho Authorization ausente")
    if not authorization.startswith("Bearer "):
        raise UnauthorizedError("Formato do cabeçalho Authorization inválido. Esperado: Bearer <token>")
    return authorization.split(" ", 1)[1].strip()


# Establishment owners

def sign_tenant_token(establishment_id: int, slug: str) -> str:
    """Issue an admin token bound to one establishment."""
    return sign_jwt(
        {"sub": str(establishment_id), "establishment_id": establishment_id, "slug": slug},
        ttl_seconds=settings.tenant_token_expire_hours * 3600,
        token_type=TokenType.TENANT,
    )


def verify_tenant_token(token: str) -> dict[str, Any]:
    """Verify an establishment admin token and return its claims."""
    payload = verify_jwt(token, TokenType.TENANT)
    if not isinstance(payload.get("establishment_id"), int):
        raise UnauthorizedError("Token inválido: claim 'establishment_id' malformado")
    return payload


# Platform console

def check_superadmin_credentials(username: str, password: str) -> bool:
    """Compare against the fixed credentials from process configuration."""
    username_ok = hmac.compare_digest(username.encode(), settings.superadmin_username.encode())
    password_ok = hmac.compare_digest(password.encode(), settings.superadmin_password.encode())
    return username_ok and password_ok


def sign_superadmin_token(username: str) -> str:
    """Issue a superadmin token with the configured fixed expiry."""
    return sign_jwt(
        {"sub": username},
        ttl_seconds=settings.superadmin_token_expire_hours * 3600,
        token_type=TokenType.SUPERADMIN,
    )


def require_superadmin(authorization: str | None = Header(default=None)) -> dict[str, Any]:
    """Dependency for every `/api/superadmin` route except login."""
    return verify_jwt(get_bearer_token(authorization), TokenType.SUPERADMIN)
