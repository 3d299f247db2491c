"""
Plan Service - commercial plans managed from the superadmin console.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Plan
from rest_api.repositories import PlanRepository
from shared.config.logging import get_logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import ConflictError, NotFoundError, ValidationError
from shared.utils.schemas import PlanOutput

logger = get_logger(__name__)


class PlanService:
    """CRUD over plans. Plans are global, not tenant-scoped."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = PlanRepository(db)

    def list_all(self) -> list[PlanOutput]:
        return [PlanOutput.model_validate(p) for p in self._repo.find_all()]

    def get(self, plan_id: int) -> Plan:
        plan = self._repo.find_by_id(plan_id)
        if plan is None:
            raise NotFoundError("Plano", plan_id)
        return plan

    def create(self, data: dict[str, Any]) -> int:
        plan = Plan(**data)
        self._db.add(plan)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError("Código de plano já existe", code=data.get("code"))
        logger.info("Plan created", plan_id=plan.id, code=plan.code)
        return plan.id

    def update(self, plan_id: int, data: dict[str, Any]) -> None:
        plan = self.get(plan_id)
        for field_name, value in data.items():
            setattr(plan, field_name, value)
        try:
            safe_commit(self._db)
        except IntegrityError as exc:
            raise ValidationError("Dados do plano inválidos", plan_id=plan_id, error=str(exc.orig))

    def delete(self, plan_id: int) -> None:
        """
        Raises:
            ConflictError: While establishments still reference the plan.
        """
        plan = self.get(plan_id)
        in_use = self._repo.count_establishments(plan_id)
        if in_use:
            raise ConflictError("Plano em uso por estabelecimentos", plan_id=plan_id, establishments=in_use)
        self._db.delete(plan)
        try:
            safe_commit(self._db)
        except IntegrityError:
            # Subscription history still points at the plan
            raise ConflictError("Plano em uso por assinaturas", plan_id=plan_id)
        logger.info("Plan deleted", plan_id=plan_id)
