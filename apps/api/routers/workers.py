"""
API router for workers, attendance and attendance-based pay
"""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.database.connection import get_db
from shared.services.remuneration_aggregator import RemunerationAggregator
from apps.api.dependencies import require_capability
from apps.api.schemas import (
    AttendanceCreate,
    AttendanceResponse,
    RemunerationResponse,
    WorkerCreate,
    WorkerResponse,
    WorkerUpdate,
)
from apps.api.services.worker_service_db import WorkerServiceDB

router = APIRouter(prefix="/workers", tags=["workers"])


@router.post("", response_model=WorkerResponse, status_code=status.HTTP_201_CREATED)
def create_worker(
    worker_data: WorkerCreate,
    _: str = Depends(require_capability("manage_workers")),
    db: Session = Depends(get_db),
):
    return WorkerResponse.from_worker(WorkerServiceDB(db).create_worker(worker_data))


@router.get("", response_model=List[WorkerResponse])
def list_workers(
    active_only: bool = Query(True, description="Hide deactivated workers"),
    db: Session = Depends(get_db),
):
    return [WorkerResponse.from_worker(w) for w in WorkerServiceDB(db).list_workers(active_only)]


@router.get("/{worker_id}", response_model=WorkerResponse)
def get_worker(worker_id: int, db: Session = Depends(get_db)):
    return WorkerResponse.from_worker(WorkerServiceDB(db).get_worker(worker_id))


@router.put("/{worker_id}", response_model=WorkerResponse)
def update_worker(
    worker_id: int,
    worker_data: WorkerUpdate,
    _: str = Depends(require_capability("manage_workers")),
    db: Session = Depends(get_db),
):
    return WorkerResponse.from_worker(WorkerServiceDB(db).update_worker(worker_id, worker_data))


@router.delete("/{worker_id}", response_model=WorkerResponse)
def deactivate_worker(
    worker_id: int,
    _: str = Depends(require_capability("manage_workers")),
    db: Session = Depends(get_db),
):
    """Deactivate a worker; task history keeps referring to them."""
    return WorkerResponse.from_worker(WorkerServiceDB(db).deactivate_worker(worker_id))


@router.post("/{worker_id}/attendance", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED)
def record_attendance(worker_id: int, attendance_data: AttendanceCreate, db: Session = Depends(get_db)):
    """One record per worker and date; omit hours for a full day."""
    return WorkerServiceDB(db).record_attendance(worker_id, attendance_data)


@router.get("/{worker_id}/attendance", response_model=List[AttendanceResponse])
def list_attendance(worker_id: int, db: Session = Depends(get_db)):
    return WorkerServiceDB(db).list_attendance(worker_id)


@router.get("/{worker_id}/remuneration", response_model=RemunerationResponse)
def get_remuneration(
    worker_id: int,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """Attendance pay: hours x daily_rate / 8, full daily rate when hours are missing."""
    return RemunerationAggregator(db).attendance_remuneration(worker_id, start_date, end_date)
