"""
Product Service.

Business rules:
- The category, when given, must belong to the same establishment
- The plan's `max_products` caps how many products a tenant can create
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Category, Establishment, Product
from rest_api.repositories import TenantRepository
from rest_api.services.base_service import TenantCRUDService
from shared.utils.exceptions import PlanLimitError, ValidationError
from shared.utils.schemas import ProductOutput


class ProductService(TenantCRUDService[Product, ProductOutput]):
    """Service for product management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Product,
            output_schema=ProductOutput,
            entity_name="Produto",
        )
        self._categories = TenantRepository(Category, db)

    def _validate_create(self, data: dict[str, Any], establishment_id: int) -> None:
        self._check_category(data.get("category_id"), establishment_id)

        establishment = self._db.get(Establishment, establishment_id)
        max_products = establishment.plan.max_products if establishment else None
        if max_products is not None and self._repo.count(establishment_id) >= max_products:
            raise PlanLimitError("produtos", max_products, establishment_id=establishment_id)

    def _validate_update(self, entity: Product, data: dict[str, Any], establishment_id: int) -> None:
        if "category_id" in data:
            self._check_category(data["category_id"], establishment_id)

    def _check_category(self, category_id: int | None, establishment_id: int) -> None:
        if category_id is None:
            return
        if not self._categories.exists(category_id, establishment_id):
            raise ValidationError(
                "Categoria inválida para este estabelecimento",
                field="category_id",
                category_id=category_id,
                establishment_id=establishment_id,
            )
