"""
Customer-facing Models: Order and Reservation.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import OrderStatus, ReservationStatus
from .base import Base, TimestampMixin
from .catalog import Neighborhood
from .table import Table


class Order(TimestampMixin, Base):
    """
    Customer order (dine-in or delivery).
    Items are stored as free text, exactly as the customer app submits them.
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[Optional[str]] = mapped_column(Text)
    type: Mapped[str] = mapped_column(Text, nullable=False)  # table, delivery
    address: Mapped[Optional[str]] = mapped_column(Text)
    neighborhood_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("neighborhoods.id", ondelete="SET NULL")
    )
    items_text: Mapped[str] = mapped_column(Text, nullable=False)
    total: Mapped[float] = mapped_column(Float, nullable=False)
    payment_method: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        Text, default=OrderStatus.PENDING, nullable=False, index=True
    )

    neighborhood: Mapped[Optional["Neighborhood"]] = relationship()

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, type='{self.type}', status='{self.status}')>"


class Reservation(TimestampMixin, Base):
    """Table booking requested by a customer."""

    __tablename__ = "reservations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_phone: Mapped[str] = mapped_column(Text, nullable=False)
    reservation_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    guests: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    table_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("restaurant_tables.id", ondelete="SET NULL")
    )
    status: Mapped[str] = mapped_column(
        Text, default=ReservationStatus.PENDING, nullable=False
    )

    table: Mapped[Optional["Table"]] = relationship()
