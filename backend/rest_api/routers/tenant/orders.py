"""
Order and reservation endpoints.
Customers place orders and reservations with the slug header only;
the kitchen/cashier board reads and updates them with the admin token.
"""

from rest_api.routers.tenant._base import (
    APIRouter, BackgroundTasks, Depends, Request, status, Session, get_db,
    limiter, settings, Establishment, current_establishment, require_tenant_admin,
    NotificationDispatcher, get_notification_dispatcher,
    CreatedResponse, SuccessResponse,
)
from rest_api.services.domain import OrderService, ReservationService
from shared.config.logging import order_logger
from shared.utils.schemas import (
    OrderCreate,
    OrderOutput,
    OrderStatusUpdate,
    ReservationCreate,
    ReservationOutput,
    ReservationUpdate,
)


router = APIRouter(tags=["orders"])


# =============================================================================
# Orders
# =============================================================================


@router.get("/orders", response_model=list[OrderOutput])
def list_orders(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> list[OrderOutput]:
    """Latest orders, newest first, with the delivery neighborhood name."""
    return OrderService(db).list_recent(establishment.id)


@router.post("/orders", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.public_write_rate_limit)
def create_order(
    request: Request,
    body: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> CreatedResponse:
    """
    Place an order.

    The order is committed first. The WhatsApp notice to the kitchen (table)
    or cashier (delivery) is sent after the response and never affects it.
    """
    service = OrderService(db)
    order_id = service.create(body.model_dump(), establishment.id)
    order_logger.info(
        "Order placed",
        order_id=order_id,
        establishment_id=establishment.id,
        type=body.type,
        total=body.total,
    )

    dispatcher.schedule(background_tasks, service.plan_notification(order_id, establishment.id))
    return CreatedResponse(id=order_id)


@router.put("/orders/{order_id}", response_model=SuccessResponse)
def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    OrderService(db).set_status(order_id, body.status, establishment.id)
    return SuccessResponse()


# =============================================================================
# Reservations
# =============================================================================


@router.get("/reservations", response_model=list[ReservationOutput])
def list_reservations(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> list[ReservationOutput]:
    """Reservations by time, with the table number when one is assigned."""
    return ReservationService(db).list_with_table(establishment.id)


@router.post("/reservations", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.public_write_rate_limit)
def create_reservation(
    request: Request,
    body: ReservationCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> CreatedResponse:
    return CreatedResponse(id=ReservationService(db).create(body.model_dump(), establishment.id))


@router.put("/reservations/{reservation_id}", response_model=SuccessResponse)
def update_reservation(
    reservation_id: int,
    body: ReservationUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    """Confirm or cancel a reservation."""
    ReservationService(db).set_status(reservation_id, body.status, establishment.id)
    return SuccessResponse()


@router.delete("/reservations/{reservation_id}", response_model=SuccessResponse)
def delete_reservation(
    reservation_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    ReservationService(db).delete(reservation_id, establishment.id)
    return SuccessResponse()
