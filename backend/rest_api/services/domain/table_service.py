"""
Table and Command Services.

Business rules:
- Table numbers are unique per establishment (409 "Mesa já existe")
- A command can only be opened on a table of the same establishment
- The open-commands listing only shows open tabs, newest first
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from rest_api.models import Command, Reservation, Table
from rest_api.repositories import CommandRepository, TenantRepository
from rest_api.services.base_service import TenantCRUDService
from shared.config.constants import CommandStatus
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import CommandOutput, TableOutput


class TableService(TenantCRUDService[Table, TableOutput]):
    """Service for physical tables."""

    conflict_message = "Mesa já existe"

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Table,
            output_schema=TableOutput,
            entity_name="Mesa",
            order_by=Table.number.asc(),
        )

    def _before_delete(self, entity: Table, establishment_id: int) -> None:
        for model in (Command, Reservation):
            self._db.execute(
                update(model)
                .where(
                    model.table_id == entity.id,
                    model.establishment_id == establishment_id,
                )
                .values(table_id=None)
            )


class CommandService(TenantCRUDService[Command, CommandOutput]):
    """Service for open tabs (commands)."""

    def __init__(self, db: Session):
        super().__init__(
            db=db,
            model=Command,
            output_schema=CommandOutput,
            entity_name="Comanda",
        )
        self._commands = CommandRepository(db)
        self._tables = TenantRepository(Table, db)

    def list_open(self, establishment_id: int) -> list[CommandOutput]:
        """Open commands with their table number, newest first."""
        return [
            CommandOutput.model_validate(row)
            for row in self._commands.list_open_with_table(establishment_id)
        ]

    def set_status(self, entity_id: int, status: str, establishment_id: int) -> None:
        self.update(entity_id, {"status": status}, establishment_id)

    def _validate_create(self, data: dict[str, Any], establishment_id: int) -> None:
        if not self._tables.exists(data["table_id"], establishment_id):
            raise ValidationError(
                "Mesa inválida para este estabelecimento",
                field="table_id",
                table_id=data["table_id"],
            )
        data.setdefault("status", CommandStatus.OPEN)
