"""
Establishment Service - tenant registration, lookup, login and console management.

Usage:
    from rest_api.services.domain import EstablishmentService

    service = EstablishmentService(db)
    establishment = service.register(request)
    token = service.authenticate("joe-burger", "secret")
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import (
    Category,
    Command,
    Establishment,
    Neighborhood,
    Order,
    Plan,
    Product,
    ReminderSent,
    Reservation,
    Setting,
    Subscription,
    Table,
)
from rest_api.repositories import EstablishmentRepository, PlanRepository, SettingRepository
from shared.config.constants import DEFAULT_PRIMARY_COLOR, EstablishmentStatus, PlanCode, SettingKeys
from shared.config.logging import audit_auth_event, get_logger, mask_email
from shared.infrastructure.db import safe_commit
from shared.security import hash_password, sign_tenant_token, verify_password
from shared.utils.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    TenantNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from shared.utils.schemas import RegisterRequest
from shared.utils.validators import normalize_phone, slugify

logger = get_logger(__name__)

SLUG_TAKEN_MESSAGE = "Slug já em uso ou dados inválidos"

# Child tables removed, in order, when the console deletes an establishment
_DEPENDENT_MODELS = (
    ReminderSent,
    Subscription,
    Setting,
    Order,
    Reservation,
    Command,
    Table,
    Product,
    Category,
    Neighborhood,
)


def default_settings(store_name: str) -> dict[str, str]:
    """Settings every new establishment starts with."""
    return {
        SettingKeys.STORE_NAME: store_name,
        SettingKeys.IS_OPEN: "1",
        SettingKeys.PRIMARY_COLOR: DEFAULT_PRIMARY_COLOR,
    }


class EstablishmentService:
    """Service for establishments (tenants)."""

    def __init__(self, db: Session):
        self._db = db
        self._repo = EstablishmentRepository(db)
        self._plans = PlanRepository(db)
        self._settings = SettingRepository(db)

    # =========================================================================
    # Public
    # =========================================================================

    def register(self, data: RegisterRequest) -> Establishment:
        """
        Create an establishment on the free plan with default settings.

        Raises:
            ConflictError: If the slug is already taken; the existing tenant is untouched.
        """
        if self._repo.slug_exists(data.slug):
            raise ConflictError(SLUG_TAKEN_MESSAGE, slug=data.slug)

        establishment = self.provision(
            name=data.name,
            slug=data.slug,
            owner_email=data.owner_email,
            owner_phone=data.owner_phone,
            password_hash=hash_password(data.password),
            plan=self.require_plan(PlanCode.FREE),
        )
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise ConflictError(SLUG_TAKEN_MESSAGE, slug=data.slug)

        logger.info(
            "Establishment registered",
            establishment_id=establishment.id,
            slug=establishment.slug,
            owner_email=mask_email(establishment.owner_email),
        )
        return establishment

    def get_by_slug(self, slug: str) -> Establishment:
        establishment = self._repo.find_by_slug(slug)
        if establishment is None:
            raise TenantNotFoundError(slug)
        return establishment

    def authenticate(self, slug: str, password: str, ip_address: Optional[str] = None) -> str:
        """
        Check the establishment password and issue an admin token.

        Raises:
            UnauthorizedError: Unknown slug or wrong password (same message for both).
        """
        establishment = self._repo.find_by_slug(slug)
        if establishment is None or not verify_password(password, establishment.password):
            audit_auth_event("TENANT_LOGIN", subject=slug, success=False, reason="invalid_credentials", ip_address=ip_address)
            raise UnauthorizedError("Credenciais inválidas")

        if establishment.status == EstablishmentStatus.SUSPENDED:
            audit_auth_event("TENANT_LOGIN", subject=slug, success=False, reason="suspended", ip_address=ip_address)
            raise UnauthorizedError("Estabelecimento suspenso")

        audit_auth_event(
            "TENANT_LOGIN",
            subject=slug,
            email=establishment.owner_email,
            success=True,
            ip_address=ip_address,
        )
        return sign_tenant_token(establishment.id, establishment.slug)

    # =========================================================================
    # Provisioning helpers (registration, external order sync, seeding)
    # =========================================================================

    def require_plan(self, code: str) -> Plan:
        plan = self._plans.find_by_code(code)
        if plan is None:
            logger.error("Plan missing from database", plan_code=code)
            raise DatabaseError(f"carregar o plano {code}")
        return plan

    def provision(
        self,
        *,
        name: str,
        slug: str,
        owner_email: str,
        owner_phone: Optional[str],
        password_hash: str,
        plan: Plan,
        **fields: Any,
    ) -> Establishment:
        """Stage a new establishment with its default settings. Does not commit."""
        establishment = Establishment(
            name=name,
            slug=slug,
            owner_email=owner_email,
            owner_phone=normalize_phone(owner_phone),
            password=password_hash,
            plan_id=plan.id,
            status=EstablishmentStatus.ACTIVE,
            **fields,
        )
        self._db.add(establishment)
        self._db.flush()

        for key, value in default_settings(name).items():
            self._settings.upsert(establishment.id, key, value)
        return establishment

    def unique_slug(self, name: str) -> str:
        """Slug derived from a store name, suffixed with -2, -3... until free."""
        base = slugify(name) or "loja"
        candidate = base
        suffix = 2
        while self._repo.slug_exists(candidate):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    # =========================================================================
    # Superadmin console
    # =========================================================================

    def list_with_plan(self) -> list[dict[str, Any]]:
        return self._repo.list_with_plan_name()

    def admin_update(self, establishment_id: int, data: dict[str, Any]) -> None:
        establishment = self._repo.find_by_id(establishment_id)
        if establishment is None:
            raise NotFoundError("Estabelecimento", establishment_id)

        if "plan_id" in data and self._plans.find_by_id(data["plan_id"]) is None:
            raise ValidationError("Plano inválido", field="plan_id", plan_id=data["plan_id"])
        if "owner_phone" in data:
            data["owner_phone"] = normalize_phone(data["owner_phone"])

        for field_name, value in data.items():
            setattr(establishment, field_name, value)
        try:
            safe_commit(self._db)
        except IntegrityError as exc:
            raise ValidationError(
                "Dados do estabelecimento inválidos", establishment_id=establishment_id, error=str(exc.orig)
            )
        logger.info("Establishment updated by superadmin", establishment_id=establishment_id, fields=sorted(data))

    def admin_delete(self, establishment_id: int) -> None:
        """Hard delete an establishment and every row it owns."""
        establishment = self._repo.find_by_id(establishment_id)
        if establishment is None:
            raise NotFoundError("Estabelecimento", establishment_id)

        for model in _DEPENDENT_MODELS:
            self._db.execute(delete(model).where(model.establishment_id == establishment_id))
        self._db.delete(establishment)
        safe_commit(self._db)
        logger.warning("Establishment deleted by superadmin", establishment_id=establishment_id, slug=establishment.slug)
