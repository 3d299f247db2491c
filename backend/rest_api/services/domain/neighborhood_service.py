"""
Neighborhood Service - delivery zones and their fees.
"""

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.orm import Session

from rest_api.models import Neighborhood, Order
from rest_api.services.base_service import TenantCRUDService
from shared.utils.schemas import NeighborhoodOutput


class NeighborhoodService(TenantCRUDService[Neighborhood, NeighborhoodOutput]):
    """Service for delivery zone management."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Neighborhood,
            output_schema=NeighborhoodOutput,
            entity_name="Bairro",
        )

    def _before_delete(self, entity: Neighborhood, establishment_id: int) -> None:
        # Past orders keep their address but lose the zone reference
        self._db.execute(
            update(Order)
            .where(
                Order.neighborhood_id == entity.id,
                Order.establishment_id == establishment_id,
            )
            .values(neighborhood_id=None)
        )
