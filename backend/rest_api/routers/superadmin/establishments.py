"""
Superadmin console: establishments.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.exceptions import NotFoundError
from rest_api.repositories import EstablishmentRepository
from rest_api.services.domain import EstablishmentService, SubscriptionService
from rest_api.services.notifications import NotificationDispatcher, get_notification_dispatcher
from shared.utils.schemas import (
    EstablishmentAdminOutput,
    EstablishmentAdminUpdate,
    PaymentWebhookResponse,
    RenewRequest,
    SuccessResponse,
)


router = APIRouter(prefix="/establishments", tags=["superadmin"])


@router.get("", response_model=list[EstablishmentAdminOutput])
def list_establishments(db: Session = Depends(get_db)) -> list[EstablishmentAdminOutput]:
    """Every establishment with its plan name and code."""
    return EstablishmentService(db).list_with_plan()


@router.put("/{establishment_id}", response_model=SuccessResponse)
def update_establishment(
    establishment_id: int,
    body: EstablishmentAdminUpdate,
    db: Session = Depends(get_db),
) -> SuccessResponse:
    EstablishmentService(db).admin_update(establishment_id, body.model_dump(exclude_unset=True))
    return SuccessResponse()


@router.delete("/{establishment_id}", response_model=SuccessResponse)
def delete_establishment(establishment_id: int, db: Session = Depends(get_db)) -> SuccessResponse:
    """Delete the establishment and all of its data."""
    EstablishmentService(db).admin_delete(establishment_id)
    return SuccessResponse()


@router.post("/{establishment_id}/renew", response_model=PaymentWebhookResponse)
async def renew_establishment(
    establishment_id: int,
    body: RenewRequest,
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> PaymentWebhookResponse:
    """Manual renewal, e.g. for a payment received outside the gateway."""
    establishment = EstablishmentRepository(db).find_by_id(establishment_id)
    if establishment is None:
        raise NotFoundError("Estabelecimento", establishment_id)
    paid_until = await SubscriptionService(db, dispatcher).renew(establishment, body.months)
    return PaymentWebhookResponse(renewed=True, paid_until=paid_until)
