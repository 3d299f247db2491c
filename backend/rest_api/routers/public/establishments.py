"""
Public establishment endpoints: self-service registration, slug lookup and owner login.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.config.settings import settings
from shared.security.rate_limit import limiter
from rest_api.services.domain import EstablishmentService
from shared.utils.schemas import (
    EstablishmentPublic,
    RegisterRequest,
    RegisterResponse,
    TenantLoginRequest,
    TokenResponse,
)


router = APIRouter(tags=["public"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.register_rate_limit)
def register(
    request: Request,
    body: RegisterRequest,
    db: Session = Depends(get_db),
) -> RegisterResponse:
    """
    Create an establishment on the free plan.
    409 when the slug is already taken.
    """
    establishment = EstablishmentService(db).register(body)
    return RegisterResponse(id=establishment.id, slug=establishment.slug)


@router.get("/establishments/{slug}", response_model=EstablishmentPublic)
def get_establishment(slug: str, db: Session = Depends(get_db)) -> EstablishmentPublic:
    return EstablishmentPublic.model_validate(EstablishmentService(db).get_by_slug(slug.lower()))


@router.post("/login", response_model=TokenResponse)
def login(
    request: Request,
    body: TenantLoginRequest,
    db: Session = Depends(get_db),
) -> TokenResponse:
    """Exchange slug + password for the admin token used on /api/e admin routes."""
    token = EstablishmentService(db).authenticate(
        body.slug.strip().lower(),
        body.password,
        ip_address=request.client.host if request.client else None,
    )
    return TokenResponse(
        access_token=token,
        expires_in=settings.tenant_token_expire_hours * 3600,
    )
