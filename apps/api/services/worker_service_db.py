"""
Worker and attendance persistence service
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError
from core.logging.logger import logger
from domain.entities.order import Order
from domain.entities.worker import Worker, WorkerAttendance
from apps.api.schemas import AttendanceCreate, WorkerCreate, WorkerUpdate


class WorkerServiceDB:
    """Workers are never hard-deleted: they stay referenced by past tasks."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def create_worker(self, worker_data: WorkerCreate) -> Worker:
        worker = Worker(**worker_data.model_dump(), is_active=True)
        self.db.add(worker)
        self.db.commit()
        self.db.refresh(worker)
        logger.info("Worker created", worker_id=worker.id, daily_rate=str(worker.daily_rate))
        return worker

    def get_worker(self, worker_id: int) -> Worker:
        worker = self.db.get(Worker, worker_id)
        if worker is None:
            raise NotFoundError("Worker", worker_id)
        return worker

    def list_workers(self, active_only: bool = True) -> List[Worker]:
        query = select(Worker)
        if active_only:
            query = query.where(Worker.is_active.is_(True))
        return list(self.db.execute(query.order_by(Worker.name, Worker.id)).scalars().all())

    def update_worker(self, worker_id: int, worker_data: WorkerUpdate) -> Worker:
        worker = self.get_worker(worker_id)
        changes: Dict[str, Any] = worker_data.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(worker, field, value)
        self.db.commit()
        self.db.refresh(worker)
        logger.info("Worker updated", worker_id=worker.id, fields=sorted(changes))
        return worker

    def deactivate_worker(self, worker_id: int) -> Worker:
        worker = self.get_worker(worker_id)
        worker.is_active = False
        self.db.commit()
        self.db.refresh(worker)
        logger.info("Worker deactivated", worker_id=worker.id)
        return worker

    def record_attendance(self, worker_id: int, attendance_data: AttendanceCreate) -> WorkerAttendance:
        self.get_worker(worker_id)
        if attendance_data.order_id is not None and self.db.get(Order, attendance_data.order_id) is None:
            raise NotFoundError("Order", attendance_data.order_id)

        record = WorkerAttendance(worker_id=worker_id, **attendance_data.model_dump())
        self.db.add(record)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(
                f"Attendance for worker {worker_id} on {attendance_data.date.isoformat()} already recorded",
                {"worker_id": worker_id, "date": attendance_data.date.isoformat()},
            )
        self.db.refresh(record)
        logger.info(
            "Attendance recorded",
            worker_id=worker_id,
            attendance_date=record.date.isoformat(),
            hours_worked=str(record.hours_worked) if record.hours_worked is not None else None,
        )
        return record

    def list_attendance(self, worker_id: int) -> List[WorkerAttendance]:
        self.get_worker(worker_id)
        query = select(WorkerAttendance).where(WorkerAttendance.worker_id == worker_id).order_by(WorkerAttendance.date)
        return list(self.db.execute(query).scalars().all())
