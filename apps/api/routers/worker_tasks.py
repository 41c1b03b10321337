"""
API router for worker tasks, earnings and suggested amounts
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from core.database.connection import get_db
from core.errors import NotFoundError
from domain.entities.order import Order
from domain.entities.worker_task import TaskType
from shared.services.remuneration_aggregator import RemunerationAggregator
from shared.services.task_amount_calculator import TaskAmountCalculator, TaskLineItem, line_items_from_order
from shared.services.worker_task_service import WorkerTaskService
from apps.api.schemas import (
    EarningsResponse,
    SuggestAmountRequest,
    SuggestAmountResponse,
    WorkerTaskCreate,
    WorkerTaskResponse,
    WorkerTaskUpdate,
)
from apps.api.services.earnings_exporter import XLSX_MEDIA_TYPE, build_earnings_workbook

router = APIRouter(prefix="/worker-tasks", tags=["worker-tasks"])


@router.get("", response_model=List[WorkerTaskResponse])
def list_tasks(
    task_type: Optional[TaskType] = Query(None),
    order_id: Optional[int] = Query(None),
    worker_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    tasks = WorkerTaskService(db).list_tasks(task_type, order_id, worker_id, start_date, end_date)
    return [WorkerTaskResponse.from_task(t) for t in tasks]


@router.get("/earnings", response_model=EarningsResponse)
def get_earnings(
    worker_id: int = Query(...),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """Task earnings of one worker; only tasks the worker was present for count."""
    return RemunerationAggregator(db).task_earnings(worker_id, start_date, end_date)


@router.get("/earnings/export")
def export_earnings(
    worker_id: int = Query(...),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    include_attendance: bool = Query(True),
    db: Session = Depends(get_db),
):
    aggregator = RemunerationAggregator(db)
    report = aggregator.task_earnings(worker_id, start_date, end_date)
    attendance = aggregator.attendance_remuneration(worker_id, start_date, end_date) if include_attendance else None
    content = build_earnings_workbook(report, attendance)
    filename = f"earnings_worker_{worker_id}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/suggest-amount", response_model=SuggestAmountResponse)
def suggest_amount(payload: SuggestAmountRequest, db: Session = Depends(get_db)):
    """Advisory amount from the rate tables; items come from the order or the request."""
    if payload.order_id is not None:
        order = db.get(Order, payload.order_id)
        if order is None:
            raise NotFoundError("Order", payload.order_id)
        items = line_items_from_order(order)
    else:
        items = [TaskLineItem(name=i.name, quantity=i.quantity, category=i.category) for i in payload.items]

    return TaskAmountCalculator().breakdown(
        items,
        payload.task_type,
        vehicle_type=payload.vehicle_type.value if payload.vehicle_type else None,
        transport_type=payload.transport_type.value if payload.transport_type else None,
    )


@router.get("/{task_id}", response_model=WorkerTaskResponse)
def get_task(task_id: int, db: Session = Depends(get_db)):
    return WorkerTaskResponse.from_task(WorkerTaskService(db).get_task(task_id))


@router.post("", response_model=WorkerTaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(task_data: WorkerTaskCreate, db: Session = Depends(get_db)):
    """Record a task; needs at least one present worker and an amount above 0."""
    task = WorkerTaskService(db).create_task(
        order_id=task_data.order_id,
        task_type=task_data.task_type,
        workers=[w.model_dump() for w in task_data.workers],
        task_amount=task_data.task_amount,
        notes=task_data.notes,
        completed_at=task_data.completed_at,
        created_by=task_data.created_by,
    )
    return WorkerTaskResponse.from_task(task)


@router.put("/{task_id}", response_model=WorkerTaskResponse)
def update_task(task_id: int, task_data: WorkerTaskUpdate, db: Session = Depends(get_db)):
    changes = task_data.model_dump(exclude_unset=True)
    return WorkerTaskResponse.from_task(WorkerTaskService(db).update_task(task_id, changes))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: int, db: Session = Depends(get_db)):
    WorkerTaskService(db).delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
