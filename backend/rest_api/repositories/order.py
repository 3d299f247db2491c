"""
Order-side Repositories: joined listings for commands, orders and reservations.
"""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Command, Neighborhood, Order, Reservation, Table
from shared.config.constants import CommandStatus, Limits
from .base import TenantRepository


def _row_to_dict(entity: Any, **extra: Any) -> dict[str, Any]:
    """Plain column values of a model instance plus joined fields."""
    data = {column.key: getattr(entity, column.key) for column in entity.__table__.columns}
    data.update(extra)
    return data


class CommandRepository(TenantRepository[Command]):
    """Open tabs, joined with their table number."""

    def __init__(self, db: Session):
        super().__init__(Command, db)

    def list_open_with_table(self, establishment_id: int) -> list[dict[str, Any]]:
        """Open commands, newest first. Commands without a table are not listed."""
        query = (
            select(Command, Table.number)
            .join(Table, Command.table_id == Table.id)
            .where(
                Command.establishment_id == establishment_id,
                Command.status == CommandStatus.OPEN,
            )
            .order_by(Command.created_at.desc(), Command.id.desc())
        )
        return [
            _row_to_dict(command, table_number=number)
            for command, number in self._db.execute(query).all()
        ]


class OrderRepository(TenantRepository[Order]):
    """Customer orders, joined with the neighborhood name."""

    def __init__(self, db: Session):
        super().__init__(Order, db)

    def list_recent(
        self,
        establishment_id: int,
        limit: int = Limits.ORDERS_LIST_LIMIT,
    ) -> list[dict[str, Any]]:
        """Newest orders first, capped at `limit`."""
        query = (
            select(Order, Neighborhood.name)
            .outerjoin(Neighborhood, Order.neighborhood_id == Neighborhood.id)
            .where(Order.establishment_id == establishment_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
        )
        return [
            _row_to_dict(order, neighborhood_name=name)
            for order, name in self._db.execute(query).all()
        ]


class ReservationRepository(TenantRepository[Reservation]):
    """Reservations, left-joined with the table number."""

    def __init__(self, db: Session):
        super().__init__(Reservation, db)

    def list_with_table(self, establishment_id: int) -> list[dict[str, Any]]:
        """All reservations ordered by reservation time, soonest first."""
        query = (
            select(Reservation, Table.number)
            .outerjoin(Table, Reservation.table_id == Table.id)
            .where(Reservation.establishment_id == establishment_id)
            .order_by(Reservation.reservation_time.asc(), Reservation.id.asc())
        )
        return [
            _row_to_dict(reservation, table_number=number)
            for reservation, number in self._db.execute(query).all()
        ]
