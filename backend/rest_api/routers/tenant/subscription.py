"""
Subscription endpoints for the establishment owner.
Upgrades and renewals are recorded as pending; the payment webhook activates them.
"""

from rest_api.routers.tenant._base import (
    APIRouter, Depends, status, Session, get_db,
    Establishment, require_tenant_admin,
    NotificationDispatcher, get_notification_dispatcher,
)
from rest_api.services.domain import EstablishmentService, SubscriptionService
from shared.config.constants import PlanCode
from shared.utils.schemas import (
    RenewRequest,
    SubscriptionOutput,
    SubscriptionStatusOutput,
    UpgradeRequest,
)


router = APIRouter(prefix="/subscription", tags=["subscription"])


def get_subscription_service(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> SubscriptionService:
    return SubscriptionService(db, dispatcher)


@router.get("", response_model=SubscriptionStatusOutput)
def get_subscription_status(
    establishment: Establishment = Depends(require_tenant_admin),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionStatusOutput:
    return service.status(establishment)


@router.post("/upgrade", response_model=SubscriptionOutput, status_code=status.HTTP_201_CREATED)
def request_upgrade(
    body: UpgradeRequest,
    establishment: Establishment = Depends(require_tenant_admin),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionOutput:
    return service.request_upgrade(establishment, body.plan_id, body.months)


@router.post("/renew", response_model=SubscriptionOutput, status_code=status.HTTP_201_CREATED)
def request_renewal(
    body: RenewRequest,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionOutput:
    """Pending premium renewal for N months, paid through the payment webhook."""
    premium = EstablishmentService(db).require_plan(PlanCode.PREMIUM)
    return service.request_upgrade(establishment, premium.id, body.months)
