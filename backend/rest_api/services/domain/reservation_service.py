"""
Reservation Service - table bookings requested by customers.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from rest_api.models import Reservation, Table
from rest_api.repositories import ReservationRepository, TenantRepository
from rest_api.services.base_service import TenantCRUDService
from shared.config.constants import ReservationStatus
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import ReservationOutput


class ReservationService(TenantCRUDService[Reservation, ReservationOutput]):
    """Service for reservations."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Reservation,
            output_schema=ReservationOutput,
            entity_name="Reserva",
        )
        self._reservations = ReservationRepository(db)
        self._tables = TenantRepository(Table, db)

    def list_with_table(self, establishment_id: int) -> list[ReservationOutput]:
        """Reservations by time, soonest first, with the table number when assigned."""
        return [
            ReservationOutput.model_validate(row)
            for row in self._reservations.list_with_table(establishment_id)
        ]

    def set_status(self, reservation_id: int, status: str, establishment_id: int) -> None:
        self.update(reservation_id, {"status": status}, establishment_id)

    def _validate_create(self, data: dict[str, Any], establishment_id: int) -> None:
        table_id = data.get("table_id")
        if table_id is not None and not self._tables.exists(table_id, establishment_id):
            raise ValidationError("Mesa inválida para este estabelecimento", field="table_id", table_id=table_id)
        data.setdefault("status", ReservationStatus.PENDING)
