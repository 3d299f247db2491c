"""
Establishment and Plan Repositories (global, not tenant-scoped).
"""

from typing import Any, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from rest_api.models import Establishment, Plan


class PlanRepository:
    """Data access for commercial plans."""

    def __init__(self, db: Session):
        self._db = db

    def find_all(self) -> Sequence[Plan]:
        return self._db.execute(select(Plan).order_by(Plan.id)).scalars().all()

    def find_by_id(self, plan_id: int) -> Plan | None:
        return self._db.get(Plan, plan_id)

    def find_by_code(self, code: str) -> Plan | None:
        return self._db.scalar(select(Plan).where(Plan.code == code))

    def count_establishments(self, plan_id: int) -> int:
        """How many establishments reference the plan."""
        query = select(func.count()).select_from(Establishment).where(Establishment.plan_id == plan_id)
        return self._db.scalar(query) or 0


class EstablishmentRepository:
    """Data access for establishments (tenants)."""

    def __init__(self, db: Session):
        self._db = db

    def find_by_id(self, establishment_id: int) -> Establishment | None:
        return self._db.get(Establishment, establishment_id)

    def find_by_slug(self, slug: str) -> Establishment | None:
        return self._db.scalar(select(Establishment).where(Establishment.slug == slug))

    def slug_exists(self, slug: str) -> bool:
        return self.find_by_slug(slug) is not None

    def find_by_owner_contact(
        self,
        email: str | None,
        phone: str | None,
    ) -> Establishment | None:
        """First establishment whose owner e-mail or phone matches."""
        conditions = []
        if email:
            conditions.append(func.lower(Establishment.owner_email) == email.strip().lower())
        if phone:
            conditions.append(Establishment.owner_phone == phone)
        if not conditions:
            return None
        query = select(Establishment).where(or_(*conditions)).order_by(Establishment.id).limit(1)
        return self._db.scalar(query)

    def find_all(self) -> Sequence[Establishment]:
        return self._db.execute(select(Establishment).order_by(Establishment.id)).scalars().all()

    def list_with_plan_name(self) -> list[dict[str, Any]]:
        """All establishments joined with their plan name. The password hash is never returned."""
        query = (
            select(Establishment, Plan.name, Plan.code)
            .join(Plan, Establishment.plan_id == Plan.id)
            .order_by(Establishment.id)
        )
        rows = []
        for establishment, plan_name, plan_code in self._db.execute(query).all():
            data = {
                column.key: getattr(establishment, column.key)
                for column in Establishment.__table__.columns
                if column.key != "password"
            }
            data["plan_name"] = plan_name
            data["plan_code"] = plan_code
            rows.append(data)
        return rows
