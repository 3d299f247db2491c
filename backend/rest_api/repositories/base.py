"""
Base Repository implementation.
Provides common data access patterns with tenant isolation.

Every query built here is filtered by establishment_id, so a caller that
guesses the id of another tenant's row simply gets nothing back.
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from rest_api.models import Base


ModelT = TypeVar("ModelT", bound=Base)


class TenantRepository(Generic[ModelT]):
    """
    Repository for rows that carry an establishment_id.

    Usage:
        repo = TenantRepository(Category, db)
        categories = repo.find_all(establishment_id=3)
        category = repo.find_by_id(12, establishment_id=3)
    """

    def __init__(self, model: type[ModelT], db: Session):
        self._model = model
        self._db = db

    @property
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        return self._model

    def _base_query(self, establishment_id: int) -> Select:
        """Base query scoped to one establishment."""
        return select(self._model).where(self._model.establishment_id == establishment_id)

    def find_all(
        self,
        establishment_id: int,
        *,
        order_by: Any | None = None,
        limit: int | None = None,
    ) -> Sequence[ModelT]:
        """Find all rows of the establishment."""
        query = self._base_query(establishment_id)
        if order_by is not None:
            query = query.order_by(order_by)
        else:
            query = query.order_by(self._model.id)
        if limit is not None:
            query = query.limit(limit)
        return self._db.execute(query).scalars().all()

    def find_by_id(self, entity_id: int, establishment_id: int) -> ModelT | None:
        """Find a row by id, only inside the establishment."""
        query = self._base_query(establishment_id).where(self._model.id == entity_id)
        return self._db.scalar(query)

    def count(self, establishment_id: int) -> int:
        """Count rows of the establishment."""
        query = (
            select(func.count())
            .select_from(self._model)
            .where(self._model.establishment_id == establishment_id)
        )
        return self._db.scalar(query) or 0

    def exists(self, entity_id: int, establishment_id: int) -> bool:
        """Check if a row exists inside the establishment."""
        return self.find_by_id(entity_id, establishment_id) is not None

    def add(self, entity: ModelT) -> ModelT:
        """Stage a new row. Constraint errors surface on the caller's commit."""
        self._db.add(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        """Stage a hard delete."""
        self._db.delete(entity)
