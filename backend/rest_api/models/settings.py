"""
Per-establishment key/value settings.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Setting(Base):
    """
    One configuration entry. Values are always stored as text (or NULL);
    typing happens when the service layer reads them back.
    """

    __tablename__ = "settings"

    establishment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("establishments.id", ondelete="CASCADE"), primary_key=True
    )
    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[Optional[str]] = mapped_column(Text)

    def __repr__(self) -> str:
        return f"<Setting(establishment_id={self.establishment_id}, key='{self.key}')>"
