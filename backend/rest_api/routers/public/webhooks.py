"""
Machine-to-machine endpoints: storefront order sync, payment confirmation
and the scheduled subscription check.
"""

import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.config.settings import settings
from shared.config.constants import CRON_SECRET_HEADER, PaymentStatus
from shared.config.logging import subscription_logger as logger
from shared.security.rate_limit import limiter
from shared.utils.exceptions import UnauthorizedError
from rest_api.services.domain import EstablishmentService, SubscriptionService
from rest_api.services.notifications import NotificationDispatcher, get_notification_dispatcher
from shared.utils.schemas import (
    OrderSyncResponse,
    OrderSyncWebhook,
    PaymentWebhook,
    PaymentWebhookResponse,
    SubscriptionCheckReport,
)


router = APIRouter(tags=["webhooks"])


def _check_api_key(api_key: str, path: str) -> None:
    if not hmac.compare_digest(api_key.encode(), settings.webhook_api_key.encode()):
        raise UnauthorizedError("Chave de API inválida", path=path)


def get_subscription_service(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> SubscriptionService:
    return SubscriptionService(db, dispatcher)


@router.post("/webhooks/order-sync", response_model=OrderSyncResponse)
@limiter.limit(settings.webhook_rate_limit)
async def order_sync(
    request: Request,
    body: OrderSyncWebhook,
    service: SubscriptionService = Depends(get_subscription_service),
) -> OrderSyncResponse:
    """
    Premium plan bought on the external storefront.
    Upgrades the buyer's establishment, or creates one when the buyer is new.
    """
    _check_api_key(body.api_key, request.url.path)
    result = await service.sync_from_external_order(body)
    return OrderSyncResponse(
        id=result.establishment.id,
        slug=result.establishment.slug,
        created=result.created,
    )


@router.post("/webhooks/payment", response_model=PaymentWebhookResponse)
@limiter.limit(settings.webhook_rate_limit)
async def payment_confirmed(
    request: Request,
    body: PaymentWebhook,
    db: Session = Depends(get_db),
    service: SubscriptionService = Depends(get_subscription_service),
) -> PaymentWebhookResponse:
    """Renew the subscription when the payment is approved. Other statuses are acknowledged only."""
    _check_api_key(body.api_key, request.url.path)
    establishment = EstablishmentService(db).get_by_slug(body.slug.strip().lower())

    if body.status.lower() not in PaymentStatus.CONFIRMED:
        logger.info(
            "Payment webhook ignored",
            establishment_id=establishment.id,
            payment_status=body.status,
            payment_id=body.payment_id,
        )
        return PaymentWebhookResponse(renewed=False, paid_until=establishment.paid_until)

    paid_until = await service.renew(establishment, body.months)
    logger.info(
        "Payment webhook renewed subscription",
        establishment_id=establishment.id,
        payment_id=body.payment_id,
        months=body.months,
    )
    return PaymentWebhookResponse(renewed=True, paid_until=paid_until)


@router.post("/cron/check-subscriptions", response_model=SubscriptionCheckReport)
async def cron_check_subscriptions(
    request: Request,
    cron_secret: Optional[str] = Header(default=None, alias=CRON_SECRET_HEADER),
    service: SubscriptionService = Depends(get_subscription_service),
) -> SubscriptionCheckReport:
    """Run the daily reminder/downgrade pass. Requires X-Cron-Secret when CRON_SECRET is set."""
    if settings.cron_secret and not hmac.compare_digest(
        (cron_secret or "").encode(), settings.cron_secret.encode()
    ):
        raise UnauthorizedError("Segredo do cron inválido", path=request.url.path)
    return await service.check_subscriptions()
