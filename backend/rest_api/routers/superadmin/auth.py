"""
Superadmin login. Credentials come from process configuration.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request

from shared.config.settings import settings
from shared.config.logging import audit_auth_event
from shared.security import check_superadmin_credentials, require_superadmin, sign_superadmin_token
from shared.utils.exceptions import UnauthorizedError
from shared.utils.schemas import SuperadminLoginRequest, SuperadminVerifyResponse, TokenResponse


router = APIRouter(tags=["superadmin"])


@router.post("/login", response_model=TokenResponse)
def login(request: Request, body: SuperadminLoginRequest) -> TokenResponse:
    ip_address = request.client.host if request.client else None
    if not check_superadmin_credentials(body.username, body.password):
        audit_auth_event("SUPERADMIN_LOGIN", subject=body.username, success=False, reason="invalid_credentials", ip_address=ip_address)
        raise UnauthorizedError("Credenciais inválidas")

    audit_auth_event("SUPERADMIN_LOGIN", subject=body.username, success=True, ip_address=ip_address)
    return TokenResponse(
        access_token=sign_superadmin_token(body.username),
        expires_in=settings.superadmin_token_expire_hours * 3600,
    )


@router.get("/verify", response_model=SuperadminVerifyResponse)
def verify(claims: dict[str, Any] = Depends(require_superadmin)) -> SuperadminVerifyResponse:
    return SuperadminVerifyResponse(username=claims["sub"])
