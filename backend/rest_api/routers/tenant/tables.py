"""
Dine-in endpoints: tables and open tabs (commands).
"""

from rest_api.routers.tenant._base import (
    APIRouter, Depends, status, Session, get_db,
    Establishment, current_establishment, require_tenant_admin,
    CreatedResponse, SuccessResponse,
)
from rest_api.services.domain import CommandService, TableService
from shared.utils.schemas import (
    CommandCreate,
    CommandOutput,
    CommandUpdate,
    TableCreate,
    TableOutput,
    TableUpdate,
)


router = APIRouter(tags=["tables"])


# =============================================================================
# Tables
# =============================================================================


@router.get("/tables", response_model=list[TableOutput])
def list_tables(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(current_establishment),
) -> list[TableOutput]:
    """Tables ordered by number."""
    return TableService(db).list_all(establishment.id)


@router.post("/tables", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_table(
    body: TableCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> CreatedResponse:
    """Create a table. 409 if the number already exists in this establishment."""
    return CreatedResponse(id=TableService(db).create(body.model_dump(), establishment.id))


@router.put("/tables/{table_id}", response_model=SuccessResponse)
def update_table(
    table_id: int,
    body: TableUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    TableService(db).update(table_id, body.model_dump(exclude_unset=True, exclude_none=True), establishment.id)
    return SuccessResponse()


@router.delete("/tables/{table_id}", response_model=SuccessResponse)
def delete_table(
    table_id: int,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    TableService(db).delete(table_id, establishment.id)
    return SuccessResponse()


# =============================================================================
# Commands (open tabs)
# =============================================================================


@router.get("/commands", response_model=list[CommandOutput])
def list_open_commands(
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> list[CommandOutput]:
    """Open commands with their table number, newest first."""
    return CommandService(db).list_open(establishment.id)


@router.post("/commands", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def open_command(
    body: CommandCreate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> CreatedResponse:
    return CreatedResponse(id=CommandService(db).create(body.model_dump(), establishment.id))


@router.put("/commands/{command_id}", response_model=SuccessResponse)
def update_command(
    command_id: int,
    body: CommandUpdate,
    db: Session = Depends(get_db),
    establishment: Establishment = Depends(require_tenant_admin),
) -> SuccessResponse:
    """Open or close a command."""
    CommandService(db).set_status(command_id, body.status, establishment.id)
    return SuccessResponse()
