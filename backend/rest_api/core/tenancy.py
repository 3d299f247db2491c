"""
Tenant resolution for the /api/e routes.

The establishment slug travels in the X-Establishment-Slug header. The
resolved row is stored on `request.state.establishment` and handed to
handlers through `current_establishment`.

Two levels of access:
- customer operations (menu reads, placing orders and reservations):
  the header alone is enough
- admin operations: additionally need a bearer token issued by
  POST /api/public/login for the same establishment

Usage:
    router = APIRouter(prefix="/api/e", dependencies=[Depends(resolve_tenant)])

    @router.get("/products")
    def list_products(establishment: Establishment = Depends(current_establishment)):
        ...

    @router.post("/products")
    def create_product(establishment: Establishment = Depends(require_tenant_admin)):
        ...
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from rest_api.models import Establishment
from rest_api.repositories import EstablishmentRepository
from shared.config.constants import TENANT_HEADER
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security import get_bearer_token, verify_tenant_token
from shared.utils.exceptions import ForbiddenError, TenantHeaderMissingError, TenantNotFoundError


def resolve_tenant(
    request: Request,
    slug: Optional[str] = Header(default=None, alias=TENANT_HEADER),
    db: Session = Depends(get_db),
) -> Establishment:
    """
    Map the slug header to an establishment.

    Raises:
        TenantHeaderMissingError: Header absent or blank (400).
        TenantNotFoundError: No establishment with that slug (404).
    """
    if slug is None or not slug.strip():
        raise TenantHeaderMissingError(request.url.path)

    establishment = EstablishmentRepository(db).find_by_slug(slug.strip().lower())
    if establishment is None:
        raise TenantNotFoundError(slug, path=request.url.path)

    request.state.establishment = establishment
    return establishment


def current_establishment(establishment: Establishment = Depends(resolve_tenant)) -> Establishment:
    """Establishment of the current request (customer-level access)."""
    return establishment


def require_tenant_admin(
    establishment: Establishment = Depends(resolve_tenant),
    authorization: Optional[str] = Header(default=None),
) -> Establishment:
    """
    Establishment of the current request, for admin operations.

    Raises:
        UnauthorizedError: Token missing, invalid or expired (401).
        ForbiddenError: Token issued for another establishment (403).
    """
    if not settings.tenant_auth_required:
        return establishment

    claims = verify_tenant_token(get_bearer_token(authorization))
    if claims["establishment_id"] != establishment.id:
        raise ForbiddenError(
            "acessar outro estabelecimento",
            token_establishment_id=claims["establishment_id"],
            establishment_id=establishment.id,
        )
    return establishment
