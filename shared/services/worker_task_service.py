"""Recording and querying worker tasks."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import NotFoundError, ValidationError
from core.logging.logger import logger
from core.utils.money import quantize_money, to_decimal
from domain.entities.order import Order
from domain.entities.worker import Worker
from domain.entities.worker_task import TaskType, WorkerTask, WorkerTaskAssignment
from shared.services.worker_share_splitter import validate_assignments


def period_bounds(start: Optional[date], end: Optional[date]):
    """Inclusive date range as [start 00:00, day after end 00:00)."""
    lower = datetime.combine(start, time.min) if start else None
    upper = datetime.combine(end + timedelta(days=1), time.min) if end else None
    return lower, upper


class WorkerTaskService:
    """CRUD over WorkerTask with the payability rules enforced on write."""

    def __init__(self, session: Session):
        self.session = session

    def _validate_amount(self, task_amount: Any) -> Decimal:
        try:
            amount = to_decimal(task_amount)
        except ValueError as e:
            raise ValidationError(str(e))
        if amount <= 0:
            raise ValidationError("Task amount must be greater than 0", {"task_amount": str(amount)})
        return quantize_money(amount)

    def _build_assignments(self, workers: Iterable[Any]) -> List[WorkerTaskAssignment]:
        entries = validate_assignments(workers)
        worker_ids = [e.worker_id for e in entries]
        found = set(self.session.execute(select(Worker.id).where(Worker.id.in_(worker_ids))).scalars().all())
        for worker_id in worker_ids:
            if worker_id not in found:
                raise NotFoundError("Worker", worker_id)
        return [WorkerTaskAssignment(worker_id=e.worker_id, present=e.present) for e in entries]

    def create_task(
        self,
        order_id: int,
        task_type: TaskType,
        workers: Iterable[Any],
        task_amount: Any,
        notes: Optional[str] = None,
        completed_at: Optional[datetime] = None,
        created_by: Optional[str] = None,
    ) -> WorkerTask:
        amount = self._validate_amount(task_amount)

        if self.session.get(Order, order_id) is None:
            raise NotFoundError("Order", order_id)

        task = WorkerTask(
            order_id=order_id,
            task_type=TaskType(task_type),
            task_amount=amount,
            notes=notes,
            created_by=created_by,
            workers=self._build_assignments(workers),
        )
        if completed_at is not None:
            task.completed_at = completed_at

        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)

        logger.info(
            "Worker task recorded",
            task_id=task.id,
            order_id=order_id,
            task_type=task.task_type.value,
            task_amount=str(amount),
            present_workers=len(task.present_workers),
        )
        return task

    def get_task(self, task_id: int) -> WorkerTask:
        task = self.session.get(WorkerTask, task_id)
        if task is None:
            raise NotFoundError("Worker task", task_id)
        return task

    def list_tasks(
        self,
        task_type: Optional[TaskType] = None,
        order_id: Optional[int] = None,
        worker_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        present_only: bool = False,
    ) -> List[WorkerTask]:
        query = select(WorkerTask)
        if task_type is not None:
            query = query.where(WorkerTask.task_type == TaskType(task_type))
        if order_id is not None:
            query = query.where(WorkerTask.order_id == order_id)
        if worker_id is not None:
            condition = (WorkerTaskAssignment.worker_id == worker_id)
            if present_only:
                condition = condition & (WorkerTaskAssignment.present.is_(True))
            query = query.where(WorkerTask.workers.any(condition))

        lower, upper = period_bounds(start_date, end_date)
        if lower is not None:
            query = query.where(WorkerTask.completed_at >= lower)
        if upper is not None:
            query = query.where(WorkerTask.completed_at < upper)

        query = query.order_by(WorkerTask.completed_at.desc(), WorkerTask.id.desc())
        return list(self.session.execute(query).scalars().all())

    def update_task(self, task_id: int, changes: Dict[str, Any]) -> WorkerTask:
        task = self.get_task(task_id)

        if "task_amount" in changes and changes["task_amount"] is not None:
            task.task_amount = self._validate_amount(changes["task_amount"])
        if changes.get("task_type") is not None:
            task.task_type = TaskType(changes["task_type"])
        if "notes" in changes:
            task.notes = changes["notes"]
        if changes.get("completed_at") is not None:
            task.completed_at = changes["completed_at"]
        if changes.get("workers") is not None:
            task.workers = self._build_assignments(changes["workers"])

        self.session.commit()
        self.session.refresh(task)
        logger.info("Worker task updated", task_id=task.id, fields=sorted(changes))
        return task

    def delete_task(self, task_id: int) -> None:
        task = self.get_task(task_id)
        self.session.delete(task)
        self.session.commit()
        logger.info("Worker task deleted", task_id=task_id)
