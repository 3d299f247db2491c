"""
Category Service.

Handles menu sections of an establishment. Deleting a category keeps its
products; they simply become uncategorized.

Usage:
    from rest_api.services.domain import CategoryService

    service = CategoryService(db)
    categories = service.list_all(establishment_id)
    category_id = service.create({"name": "Lanches"}, establishment_id)
"""

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import Session

from rest_api.models import Category, Product
from rest_api.services.base_service import TenantCRUDService
from shared.utils.schemas import CategoryOutput


class CategoryService(TenantCRUDService[Category, CategoryOutput]):
    """Service for category management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Category,
            output_schema=CategoryOutput,
            entity_name="Categoria",
        )

    def _before_delete(self, entity: Category, establishment_id: int) -> None:
        self._db.execute(
            update(Product)
            .where(
                Product.category_id == entity.id,
                Product.establishment_id == establishment_id,
            )
            .values(category_id=None)
        )
