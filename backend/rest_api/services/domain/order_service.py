"""
Order Service.

Business rules:
- Orders are created by customers and are immutable except for status
- The neighborhood, when given, must belong to the same establishment
- After the order is committed a WhatsApp notification is planned for the
  kitchen (table orders) or the cashier (delivery orders)
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Neighborhood, Order
from rest_api.repositories import OrderRepository, TenantRepository
from rest_api.services.base_service import TenantCRUDService
from rest_api.services.domain.settings_service import EstablishmentConfig, SettingsService
from rest_api.services.notifications import (
    GatewayCredentials,
    OutboundMessage,
    PlannedMessage,
    SkippedMessage,
    build_order_message,
    select_order_target,
)
from shared.config.constants import OrderStatus
from shared.config.logging import order_logger as logger
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import OrderOutput

ORDER_NOTIFICATION = "order"


class OrderService(TenantCRUDService[Order, OrderOutput]):
    """Service for customer orders."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Order,
            output_schema=OrderOutput,
            entity_name="Pedido",
        )
        self._orders = OrderRepository(db)
        self._neighborhoods = TenantRepository(Neighborhood, db)

    def list_recent(self, establishment_id: int) -> list[OrderOutput]:
        """Newest orders first, with the neighborhood name."""
        return [
            OrderOutput.model_validate(row)
            for row in self._orders.list_recent(establishment_id)
        ]

    def set_status(self, order_id: int, status: str, establishment_id: int) -> None:
        self.update(order_id, {"status": status}, establishment_id)
        logger.info("Order status changed", order_id=order_id, status=status, establishment_id=establishment_id)

    def plan_notification(self, order_id: int, establishment_id: int) -> PlannedMessage:
        """
        Decide whether and where the new order is announced on WhatsApp.

        Runs after the order is committed, so a failure here only skips the
        notification.
        """
        try:
            order = self.get_entity(order_id, establishment_id)
            config = SettingsService(self._db).get_config(establishment_id)
        except Exception as exc:
            logger.error(
                "Order notification planning failed",
                order_id=order_id,
                establishment_id=establishment_id,
                error=str(exc),
                exc_info=True,
            )
            return SkippedMessage(ORDER_NOTIFICATION, "notification planning failed", establishment_id)
        return plan_order_notification(config, order)

    def _validate_create(self, data: dict[str, Any], establishment_id: int) -> None:
        neighborhood_id = data.get("neighborhood_id")
        if neighborhood_id is not None and not self._neighborhoods.exists(neighborhood_id, establishment_id):
            raise ValidationError(
                "Bairro inválido para este estabelecimento",
                field="neighborhood_id",
                neighborhood_id=neighborhood_id,
            )
        data.setdefault("status", OrderStatus.PENDING)


def plan_order_notification(config: EstablishmentConfig, order: Order) -> PlannedMessage:
    """
    Build the gateway message for an order, or the reason it is not sent.

    Sent only when automation is enabled, a gateway URL is configured and the
    target number for the order type is set.
    """
    if not config.evolution_enabled:
        return SkippedMessage(ORDER_NOTIFICATION, "automation disabled", order.establishment_id)
    if not config.evolution_api_url:
        return SkippedMessage(ORDER_NOTIFICATION, "gateway url not configured", order.establishment_id)

    target = select_order_target(order.type, config.whatsapp_kitchen, config.whatsapp_cashier)
    if not target:
        return SkippedMessage(ORDER_NOTIFICATION, f"no target number for {order.type} orders", order.establishment_id)

    text = build_order_message(
        order_id=order.id,
        customer_name=order.customer_name,
        order_type=order.type,
        items_text=order.items_text,
        total=order.total,
        payment_method=order.payment_method,
    )
    return OutboundMessage(
        kind=ORDER_NOTIFICATION,
        credentials=GatewayCredentials(
            base_url=config.evolution_api_url,
            instance=config.evolution_instance,
            api_key=config.evolution_api_key,
        ),
        number=target,
        text=text,
        establishment_id=order.establishment_id,
    )
