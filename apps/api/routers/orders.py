"""
API router for orders and their status lifecycle
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.database.connection import get_db
from core.errors import ValidationError
from domain.entities.order import OrderStatus
from shared.services.order_lifecycle_service import (
    OrderLifecycleCoordinator,
    StatusChangeRequest,
    TransitionResult,
)
from apps.api.dependencies import require_capability
from apps.api.schemas import (
    DiscountApproval,
    DiscountRequest,
    OrderCreate,
    OrderResponse,
    OrderUpdate,
    PaymentUpdate,
    PricingAdjustmentResponse,
    PricingPreviewRequest,
    ReturnStatusResponse,
    StatusChangeRequestSchema,
    StatusChangeResponse,
    ViolationResponse,
    WorkerTaskResponse,
)
from apps.api.services.order_service_db import OrderServiceDB

router = APIRouter(prefix="/orders", tags=["orders"])


def _status_response(result: TransitionResult) -> StatusChangeResponse:
    return StatusChangeResponse(
        order=OrderResponse.model_validate(result.order),
        adjusted_amount=result.adjusted_amount,
        difference=result.difference,
        message=result.message,
        adjustment=PricingAdjustmentResponse(**result.adjustment.to_dict()) if result.adjustment else None,
        task=WorkerTaskResponse.from_task(result.task) if result.task else None,
        task_error=result.task_error,
        violations=[ViolationResponse.model_validate(v) for v in result.violations],
    )


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(order_data: OrderCreate, db: Session = Depends(get_db)):
    """Create a pending order; unit prices are snapshotted from the catalogue."""
    return OrderServiceDB(db).create_order(order_data)


@router.get("", response_model=List[OrderResponse])
def list_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status", description="Order status"),
    client_id: Optional[int] = Query(None, description="Client filter"),
    start_date: Optional[date] = Query(None, description="Rental period overlaps from this date"),
    end_date: Optional[date] = Query(None, description="Rental period overlaps up to this date"),
    db: Session = Depends(get_db),
):
    return OrderServiceDB(db).list_orders(status_filter, client_id, start_date, end_date)


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderServiceDB(db).get_order(order_id)


@router.put("/{order_id}", response_model=OrderResponse)
def update_order(order_id: int, order_data: OrderUpdate, db: Session = Depends(get_db)):
    """Generic update. Status is not accepted here."""
    return OrderServiceDB(db).update_order(order_id, order_data)


@router.put("/{order_id}/status", response_model=StatusChangeResponse)
def change_order_status(order_id: int, payload: StatusChangeRequestSchema, db: Session = Depends(get_db)):
    """
    Move the order to a new status.

    Completing applies return pricing, cancelling applies the cancellation
    fee. The worker task for the transition is recorded after the status is
    saved; a failure there is reported in ``task_error``.
    """
    request = StatusChangeRequest(
        status=payload.status,
        actual_return_date=payload.actual_return_date,
        chargeable_days=payload.chargeable_days,
        workers=[w.model_dump() for w in payload.workers],
        task_amount=payload.task_amount,
        vehicle_type=payload.vehicle_type.value if payload.vehicle_type else None,
        transport_type=payload.transport_type.value if payload.transport_type else None,
        task_notes=payload.task_notes,
        changed_by=payload.changed_by,
    )
    result = OrderLifecycleCoordinator(db).change_status(order_id, request)
    return _status_response(result)


@router.post("/{order_id}/pricing-preview", response_model=PricingAdjustmentResponse)
def preview_pricing(order_id: int, payload: PricingPreviewRequest, db: Session = Depends(get_db)):
    """Pricing of a completion or cancellation without saving anything."""
    if payload.status not in (OrderStatus.COMPLETED, OrderStatus.CANCELLED):
        raise ValidationError("Pricing preview is available for completed or cancelled only")
    adjustment = OrderLifecycleCoordinator(db).preview(
        order_id,
        StatusChangeRequest(
            status=payload.status,
            actual_return_date=payload.actual_return_date,
            chargeable_days=payload.chargeable_days,
        ),
    )
    return PricingAdjustmentResponse(**adjustment.to_dict())


@router.get("/{order_id}/return-status", response_model=ReturnStatusResponse)
def get_return_status(
    order_id: int,
    as_of: Optional[date] = Query(None, description="Date to classify when nothing was returned yet"),
    db: Session = Depends(get_db),
):
    analysis = OrderServiceDB(db).return_status(order_id, as_of)
    return ReturnStatusResponse(
        order_id=order_id,
        status=analysis.status,
        is_early=analysis.is_early,
        is_late=analysis.is_late,
        is_within_grace=analysis.is_within_grace,
        extra_days=analysis.extra_days,
        actual_date=analysis.actual_date,
        planned_date=analysis.planned_date,
        grace_end_date=analysis.grace_end_date,
    )


@router.put("/{order_id}/payment", response_model=OrderResponse)
def update_payment(order_id: int, payload: PaymentUpdate, db: Session = Depends(get_db)):
    return OrderServiceDB(db).update_payment(order_id, payload.amount_paid)


@router.post("/{order_id}/discount/request", response_model=OrderResponse)
def request_discount(order_id: int, payload: DiscountRequest, db: Session = Depends(get_db)):
    return OrderServiceDB(db).request_discount(order_id, payload.discount_amount, payload.reason)


@router.put("/{order_id}/discount/approve", response_model=OrderResponse)
def approve_discount(
    order_id: int,
    payload: DiscountApproval,
    role: str = Depends(require_capability("approve_discount")),
    db: Session = Depends(get_db),
):
    """Approve or reject a requested discount."""
    return OrderServiceDB(db).approve_discount(order_id, payload.approved, payload.approved_by or role)
