"""
Establishment settings endpoints (key/value store).
"""

from typing import Optional

from rest_api.routers.tenant._base import (
    APIRouter, Depends, Session, get_db,
    Establishment, current_establishment, require_tenant_admin,
    SuccessResponse,
)
from rest_api.services.domain import SettingsService
from shared.utils.schemas import SettingValue


router = APIRouter(tags=["settings"])


@router.get("/settings", response_model=dict[str, Optional[str]])
def get_settings(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> dict[str, Optional[str]]:
    """All settings, secrets included."""
    return SettingsService(db).get_all(establishment.id)


@router.get("/settings/public", response_model=dict[str, Optional[str]])
def get_public_settings(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> dict[str, Optional[str]]:
    """Settings safe to show on the customer menu (no gateway or AI credentials)."""
    return SettingsService(db).get_public(establishment.id)


@router.post("/settings", response_model=SuccessResponse)
def save_settings(
    body: dict[str, SettingValue],
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    """
    Upsert every key in the body in one transaction.
    Booleans are stored as "1"/"0"; null clears the value.
    """
    SettingsService(db).upsert_many(establishment.id, body)
    return SuccessResponse()
