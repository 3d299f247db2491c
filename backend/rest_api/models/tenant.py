"""
Multi-Tenancy Models: Plan and Establishment.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Date, DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import EstablishmentStatus
from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .billing import Subscription


class Plan(Base):
    """
    Commercial plan (global, not tenant-scoped).
    `code` is what the subscription engine matches on ("free", "premium").
    """

    __tablename__ = "plans"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    max_products: Mapped[Optional[int]] = mapped_column(Integer)  # None = unlimited
    enable_ai: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    enable_reservations: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    enable_automation: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    establishments: Mapped[list["Establishment"]] = relationship(back_populates="plan")

    def __repr__(self) -> str:
        return f"<Plan(id={self.id}, code='{self.code}', price={self.price})>"


class Establishment(TimestampMixin, Base):
    """
    A restaurant (top-level tenant).
    Every other tenant-scoped row carries its establishment_id.
    """

    __tablename__ = "establishments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(Text, unique=True, nullable=False, index=True)
    owner_email: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    owner_phone: Mapped[Optional[str]] = mapped_column(Text, index=True)
    password: Mapped[str] = mapped_column(Text, nullable=False)  # bcrypt hash
    plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("plans.id"), nullable=False)
    status: Mapped[str] = mapped_column(
        Text, default=EstablishmentStatus.ACTIVE, nullable=False, index=True
    )  # active, suspended, pending
    paid_until: Mapped[Optional[date]] = mapped_column(Date, index=True)
    trial_ends_at: Mapped[Optional[date]] = mapped_column(Date)
    last_payment_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    plan: Mapped["Plan"] = relationship(back_populates="establishments")
    subscriptions: Mapped[list["Subscription"]] = relationship(back_populates="establishment")

    def __repr__(self) -> str:
        return f"<Establishment(id={self.id}, slug='{self.slug}', status='{self.status}')>"
