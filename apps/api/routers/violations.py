"""
API router for order violations (late returns, damage, missing items)
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from core.database.connection import get_db
from domain.entities.violation import ViolationType
from shared.services.violation_service import ViolationService
from apps.api.dependencies import require_capability
from apps.api.schemas import ViolationCreate, ViolationResolve, ViolationResponse, ViolationUpdate

router = APIRouter(prefix="/violations", tags=["violations"])


@router.get("", response_model=List[ViolationResponse])
def list_violations(
    order_id: Optional[int] = Query(None, description="Order filter"),
    resolved: Optional[bool] = Query(None, description="Resolved filter"),
    violation_type: Optional[ViolationType] = Query(None),
    db: Session = Depends(get_db),
):
    return ViolationService(db).list_violations(order_id, resolved, violation_type)


@router.get("/{violation_id}", response_model=ViolationResponse)
def get_violation(violation_id: int, db: Session = Depends(get_db)):
    return ViolationService(db).get_violation(violation_id)


@router.post("", response_model=ViolationResponse, status_code=status.HTTP_201_CREATED)
def create_violation(
    payload: ViolationCreate,
    role: str = Depends(require_capability("manage_violations")),
    db: Session = Depends(get_db),
):
    return ViolationService(db).create_violation(
        payload.order_id,
        payload.violation_type,
        payload.description,
        payload.penalty_amount,
        created_by=payload.created_by or role,
    )


@router.put("/{violation_id}", response_model=ViolationResponse)
def update_violation(
    violation_id: int,
    payload: ViolationUpdate,
    _: str = Depends(require_capability("manage_violations")),
    db: Session = Depends(get_db),
):
    return ViolationService(db).update_violation(violation_id, payload.model_dump(exclude_unset=True))


@router.put("/{violation_id}/resolve", response_model=ViolationResponse)
def resolve_violation(
    violation_id: int,
    payload: ViolationResolve,
    role: str = Depends(require_capability("manage_violations")),
    db: Session = Depends(get_db),
):
    """Close a violation with what was paid and what was waived."""
    return ViolationService(db).resolve_violation(
        violation_id,
        paid_amount=payload.paid_amount,
        waived_amount=payload.waived_amount,
        resolution_notes=payload.resolution_notes,
        resolved_by=payload.resolved_by or role,
    )


@router.delete("/{violation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_violation(
    violation_id: int,
    _: str = Depends(require_capability("manage_violations")),
    db: Session = Depends(get_db),
):
    ViolationService(db).delete_violation(violation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
