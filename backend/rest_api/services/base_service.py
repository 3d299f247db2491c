"""
Tenant-scoped CRUD base for the owner panel resources.

    list_all(establishment_id)                  -> [OutputT]
    create(data, establishment_id)              -> new id
    update(entity_id, data, establishment_id)
    delete(entity_id, establishment_id)

Lookups always match `id AND establishment_id`, so a row of another
establishment is simply not found (404), never forbidden.

    class NeighborhoodService(TenantCRUDService[Neighborhood, NeighborhoodOutput]):
        def __init__(self, db: Session):
            super().__init__(db, Neighborhood, NeighborhoodOutput, "Bairro")
"""

from __future__ import annotations

from typing import Any, Generic, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Base
from rest_api.repositories import TenantRepository
from shared.infrastructure.db import safe_commit
from shared.config.logging import get_logger
from shared.utils.exceptions import ConflictError, DatabaseError, NotFoundError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
OutputT = TypeVar("OutputT", bound=BaseModel)


class TenantCRUDService(Generic[ModelT, OutputT]):
    """
    Subclasses add business rules through `_validate_create`,
    `_validate_update` and `_before_delete`, and set `conflict_message`
    for uniqueness violations.
    """

    conflict_message: str = "Registro duplicado"

    def __init__(
        self,
        db: Session,
        model: Type[ModelT],
        output_schema: Type[OutputT],
        entity_name: str,
        *,
        order_by: Any | None = None,
    ):
        self._db = db
        self._model = model
        self._repo = TenantRepository(model, db)
        self._output_schema = output_schema
        self._entity_name = entity_name
        self._order_by = order_by

    def list_all(self, establishment_id: int) -> list[OutputT]:
        rows = self._repo.find_all(establishment_id, order_by=self._order_by)
        return [self.to_output(row) for row in rows]

    def get_entity(self, entity_id: int, establishment_id: int) -> ModelT:
        entity = self._repo.find_by_id(entity_id, establishment_id)
        if entity is None:
            raise NotFoundError(self._entity_name, entity_id, establishment_id=establishment_id)
        return entity

    def create(self, data: dict[str, Any], establishment_id: int) -> int:
        self._validate_create(data, establishment_id)

        entity = self._model(**data, establishment_id=establishment_id)
        self._repo.add(entity)
        self._commit("criar", establishment_id=establishment_id)

        logger.info(
            f"{self._model.__name__} created",
            entity_id=entity.id,
            establishment_id=establishment_id,
        )
        return entity.id

    def update(self, entity_id: int, data: dict[str, Any], establishment_id: int) -> None:
        """Partial update: only keys present in `data` change."""
        entity = self.get_entity(entity_id, establishment_id)
        self._validate_update(entity, data, establishment_id)

        for name, value in data.items():
            if hasattr(entity, name):
                setattr(entity, name, value)

        self._commit("atualizar", entity_id=entity_id, establishment_id=establishment_id)

    def delete(self, entity_id: int, establishment_id: int) -> None:
        """Hard delete."""
        entity = self.get_entity(entity_id, establishment_id)
        self._before_delete(entity, establishment_id)
        self._repo.delete(entity)
        self._commit("excluir", entity_id=entity_id, establishment_id=establishment_id)

    def to_output(self, entity: ModelT) -> OutputT:
        return self._output_schema.model_validate(entity)

    # Hooks

    def _validate_create(self, data: dict[str, Any], establishment_id: int) -> None:
        pass

    def _validate_update(self, entity: ModelT, data: dict[str, Any], establishment_id: int) -> None:
        pass

    def _before_delete(self, entity: ModelT, establishment_id: int) -> None:
        """Detach or reject dependent rows; runs before the delete is flushed."""
        pass

    def _commit(self, operation: str, **log_context: Any) -> None:
        """IntegrityError becomes ConflictError, anything else DatabaseError."""
        try:
            safe_commit(self._db)
        except IntegrityError as exc:
            raise ConflictError(self.conflict_message, error=str(exc.orig), **log_context)
        except Exception as exc:
            logger.error(f"Failed to {operation} {self._entity_name}", error=str(exc), **log_context)
            raise DatabaseError(f"{operation} {self._entity_name.lower()}")
