"""
Superadmin console: commercial plans.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from rest_api.services.domain import PlanService
from shared.utils.schemas import (
    CreatedResponse,
    PlanCreate,
    PlanOutput,
    PlanUpdate,
    SuccessResponse,
)


router = APIRouter(prefix="/plans", tags=["superadmin"])


@router.get("", response_model=list[PlanOutput])
def list_plans(db: Session = Depends(get_db)) -> list[PlanOutput]:
    return PlanService(db).list_all()


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_plan(body: PlanCreate, db: Session = Depends(get_db)) -> CreatedResponse:
    return CreatedResponse(id=PlanService(db).create(body.model_dump()))


@router.put("/{plan_id}", response_model=SuccessResponse)
def update_plan(plan_id: int, body: PlanUpdate, db: Session = Depends(get_db)) -> SuccessResponse:
    PlanService(db).update(plan_id, body.model_dump(exclude_unset=True))
    return SuccessResponse()


@router.delete("/{plan_id}", response_model=SuccessResponse)
def delete_plan(plan_id: int, db: Session = Depends(get_db)) -> SuccessResponse:
    """409 while any establishment is on this plan."""
    PlanService(db).delete(plan_id)
    return SuccessResponse()
