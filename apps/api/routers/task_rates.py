"""
API router for configured task rates
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.database.connection import get_db
from domain.entities.worker_task import TaskType
from apps.api.dependencies import require_capability
from apps.api.schemas import TaskRateCreate, TaskRateResponse, TaskRateSuggestion, TaskRateUpdate
from apps.api.services.task_rate_service_db import TaskRateServiceDB

router = APIRouter(prefix="/task-rates", tags=["task-rates"])


@router.get("", response_model=List[TaskRateResponse])
def list_rates(
    task_type: Optional[TaskType] = Query(None),
    active_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    return TaskRateServiceDB(db).list_rates(task_type, active_only)


@router.post("", response_model=TaskRateResponse, status_code=status.HTTP_201_CREATED)
def create_rate(
    rate_data: TaskRateCreate,
    _: str = Depends(require_capability("manage_rates")),
    db: Session = Depends(get_db),
):
    return TaskRateServiceDB(db).create_rate(rate_data)


@router.put("/{rate_id}", response_model=TaskRateResponse)
def update_rate(
    rate_id: int,
    rate_data: TaskRateUpdate,
    _: str = Depends(require_capability("manage_rates")),
    db: Session = Depends(get_db),
):
    return TaskRateServiceDB(db).update_rate(rate_id, rate_data)


@router.delete("/{rate_id}", response_model=TaskRateResponse)
def deactivate_rate(
    rate_id: int,
    _: str = Depends(require_capability("manage_rates")),
    db: Session = Depends(get_db),
):
    """Take a rate out of use; it stays listed as inactive."""
    return TaskRateServiceDB(db).deactivate_rate(rate_id)


@router.get("/{rate_id}/suggest", response_model=TaskRateSuggestion)
def suggest_amount(
    rate_id: int,
    quantity: int = Query(..., ge=0),
    db: Session = Depends(get_db),
):
    """rate_per_unit x quantity, rounded to whole units."""
    return TaskRateServiceDB(db).suggest(rate_id, quantity)
