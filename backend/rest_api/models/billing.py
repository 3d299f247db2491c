"""
Billing Models: Subscription and ReminderSent.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import SubscriptionStatus
from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .tenant import Establishment, Plan


class Subscription(TimestampMixin, Base):
    """
    Subscription record for an establishment.
    Several rows may exist per establishment (history, pending upgrades).
    """

    __tablename__ = "subscriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("plans.id"), nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    status: Mapped[str] = mapped_column(
        Text, default=SubscriptionStatus.ACTIVE, nullable=False, index=True
    )  # active, paused, cancelled, pending, expired
    start_date: Mapped[Optional[date]] = mapped_column(Date)
    end_date: Mapped[Optional[date]] = mapped_column(Date)
    next_payment_date: Mapped[Optional[date]] = mapped_column(Date)

    establishment: Mapped["Establishment"] = relationship(back_populates="subscriptions")
    plan: Mapped["Plan"] = relationship()

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, establishment_id={self.establishment_id}, status='{self.status}')>"


class ReminderSent(Base):
    """
    Log of renewal reminders, used to avoid notifying twice
    inside the deduplication window.
    """

    __tablename__ = "reminders_sent"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reminder_type: Mapped[str] = mapped_column(Text, nullable=False)  # expiring_7d, expiring_3d, expired
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
