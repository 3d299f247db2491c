"""
Dine-in Models: Table and Command (open tab).
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shared.config.constants import CommandStatus, TableStatus
from .base import Base, TimestampMixin


class Table(Base):
    """
    Physical table.
    Numbers are unique per establishment.
    """

    __tablename__ = "restaurant_tables"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, default=TableStatus.AVAILABLE, nullable=False
    )  # available, occupied, reserved

    commands: Mapped[list["Command"]] = relationship(back_populates="table")

    __table_args__ = (
        UniqueConstraint("establishment_id", "number", name="uq_table_establishment_number"),
    )

    def __repr__(self) -> str:
        return f"<Table(id={self.id}, number={self.number}, status='{self.status}')>"


class Command(TimestampMixin, Base):
    """Open tab attached to a table."""

    __tablename__ = "commands"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    table_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("restaurant_tables.id", ondelete="SET NULL"), index=True
    )
    waiter_name: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        Text, default=CommandStatus.OPEN, nullable=False, index=True
    )  # open, closed

    table: Mapped[Optional["Table"]] = relationship(back_populates="commands")
