"""Worker earnings over a period: task shares and attendance pay."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.config.settings import settings
from core.errors import NotFoundError, ValidationError
from core.logging.logger import logger
from core.utils.money import quantize_money
from domain.entities.worker import Worker, WorkerAttendance
from domain.entities.worker_task import TaskType, WorkerTask
from shared.services.worker_share_splitter import PaymentPolicy, policy_for, present_count, share_for
from shared.services.worker_task_service import WorkerTaskService


ZERO = Decimal("0.00")


@dataclass
class TaskEarning:
    task_id: int
    order_id: int
    task_type: TaskType
    task_amount: Decimal
    present_workers: int
    policy: PaymentPolicy
    earnings: Decimal
    completed_at: Optional[datetime] = None


@dataclass
class TaskTypeSummary:
    task_type: TaskType
    count: int = 0
    earnings: Decimal = ZERO


@dataclass
class TaskEarningsReport:
    worker_id: int
    worker_name: str
    start_date: Optional[date]
    end_date: Optional[date]
    total_tasks: int
    total_earnings: Decimal
    by_task_type: Dict[str, TaskTypeSummary] = field(default_factory=dict)
    lines: List[TaskEarning] = field(default_factory=list)


@dataclass
class AttendanceLine:
    date: date
    hours_worked: Optional[Decimal]
    amount: Decimal
    order_id: Optional[int] = None


@dataclass
class AttendanceReport:
    worker_id: int
    worker_name: str
    daily_rate: Decimal
    hourly_rate: Decimal
    start_date: Optional[date]
    end_date: Optional[date]
    total_days: int
    total_hours: Decimal
    total_remuneration: Decimal
    lines: List[AttendanceLine] = field(default_factory=list)


@dataclass
class WorkerRemunerationLine:
    worker_id: int
    worker_name: str
    daily_rate: Decimal
    total_days: int
    total_hours: Decimal
    attendance_amount: Decimal
    task_count: int
    task_earnings: Decimal
    total: Decimal


@dataclass
class RemunerationSummary:
    start_date: date
    end_date: date
    total_attendance: Decimal
    total_task_earnings: Decimal
    total_remuneration: Decimal
    workers: List[WorkerRemunerationLine] = field(default_factory=list)


def attendance_amount(daily_rate: Any, hours_worked: Any, hours_per_day: Optional[int] = None) -> Decimal:
    """Pay for one attendance record; a record without hours is a full day."""
    rate = Decimal(daily_rate or 0)
    if hours_worked is None:
        return quantize_money(rate)
    per_day = Decimal(hours_per_day or settings.working_hours_per_day)
    return quantize_money(Decimal(hours_worked) * rate / per_day)


class RemunerationAggregator:
    """Read-only earnings reports per worker and across the workforce."""

    def __init__(self, session: Session, task_service: Optional[WorkerTaskService] = None):
        self.session = session
        self.task_service = task_service or WorkerTaskService(session)

    def _get_worker(self, worker_id: int) -> Worker:
        worker = self.session.get(Worker, worker_id)
        if worker is None:
            raise NotFoundError("Worker", worker_id)
        return worker

    @staticmethod
    def _check_period(start_date: Optional[date], end_date: Optional[date]) -> None:
        if start_date and end_date and end_date < start_date:
            raise ValidationError(
                "End date must not be before start date",
                {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

    def task_earning(self, task: WorkerTask, worker_id: int) -> Optional[TaskEarning]:
        """Share of ``worker_id`` in ``task``; None when the worker is not on it."""
        policy = policy_for(task.task_type)
        amount = share_for(task.task_amount, task.workers, worker_id, policy)
        if amount is None:
            return None
        return TaskEarning(
            task_id=task.id,
            order_id=task.order_id,
            task_type=task.task_type,
            task_amount=Decimal(task.task_amount),
            present_workers=present_count(task.workers),
            policy=policy,
            earnings=amount,
            completed_at=task.completed_at,
        )

    def task_earnings(
        self,
        worker_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> TaskEarningsReport:
        worker = self._get_worker(worker_id)
        self._check_period(start_date, end_date)

        tasks = self.task_service.list_tasks(
            worker_id=worker_id,
            start_date=start_date,
            end_date=end_date,
            present_only=True,
        )

        lines: List[TaskEarning] = []
        by_type: Dict[str, TaskTypeSummary] = {}
        total = ZERO
        for task in tasks:
            line = self.task_earning(task, worker_id)
            if line is None:
                continue
            lines.append(line)
            summary = by_type.setdefault(line.task_type.value, TaskTypeSummary(task_type=line.task_type))
            summary.count += 1
            summary.earnings += line.earnings
            total += line.earnings

        logger.debug(
            "Task earnings aggregated",
            worker_id=worker_id,
            tasks=len(lines),
            total_earnings=str(total),
        )
        return TaskEarningsReport(
            worker_id=worker.id,
            worker_name=worker.name,
            start_date=start_date,
            end_date=end_date,
            total_tasks=len(lines),
            total_earnings=quantize_money(total),
            by_task_type=by_type,
            lines=lines,
        )

    def attendance_remuneration(
        self,
        worker_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceReport:
        worker = self._get_worker(worker_id)
        self._check_period(start_date, end_date)

        query = select(WorkerAttendance).where(WorkerAttendance.worker_id == worker_id)
        if start_date is not None:
            query = query.where(WorkerAttendance.date >= start_date)
        if end_date is not None:
            query = query.where(WorkerAttendance.date <= end_date)
        records = self.session.execute(query.order_by(WorkerAttendance.date)).scalars().all()

        hours_per_day = settings.working_hours_per_day
        lines = []
        total_hours = ZERO
        total = ZERO
        for record in records:
            amount = attendance_amount(worker.daily_rate, record.hours_worked, hours_per_day)
            hours = Decimal(record.hours_worked) if record.hours_worked is not None else Decimal(hours_per_day)
            lines.append(AttendanceLine(
                date=record.date,
                hours_worked=record.hours_worked,
                amount=amount,
                order_id=record.order_id,
            ))
            total_hours += hours
            total += amount

        return AttendanceReport(
            worker_id=worker.id,
            worker_name=worker.name,
            daily_rate=quantize_money(worker.daily_rate or 0),
            hourly_rate=quantize_money(worker.hourly_rate(hours_per_day)),
            start_date=start_date,
            end_date=end_date,
            total_days=len(lines),
            total_hours=quantize_money(total_hours),
            total_remuneration=quantize_money(total),
            lines=lines,
        )

    def remuneration_summary(self, start_date: Optional[date], end_date: Optional[date]) -> RemunerationSummary:
        """
        Attendance pay and task earnings of every active worker for a period.

        Both bounds are required; workers with nothing in the period are
        listed with zero totals.
        """
        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required")
        self._check_period(start_date, end_date)

        workers = self.session.execute(
            select(Worker).where(Worker.is_active.is_(True)).order_by(Worker.name, Worker.id)
        ).scalars().all()

        lines: List[WorkerRemunerationLine] = []
        for worker in workers:
            attendance = self.attendance_remuneration(worker.id, start_date, end_date)
            tasks = self.task_earnings(worker.id, start_date, end_date)
            lines.append(WorkerRemunerationLine(
                worker_id=worker.id,
                worker_name=worker.name,
                daily_rate=attendance.daily_rate,
                total_days=attendance.total_days,
                total_hours=attendance.total_hours,
                attendance_amount=attendance.total_remuneration,
                task_count=tasks.total_tasks,
                task_earnings=tasks.total_earnings,
                total=quantize_money(attendance.total_remuneration + tasks.total_earnings),
            ))

        total_attendance = sum((line.attendance_amount for line in lines), ZERO)
        total_tasks = sum((line.task_earnings for line in lines), ZERO)
        logger.info(
            "Remuneration summary built",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            workers=len(lines),
            total_remuneration=str(total_attendance + total_tasks),
        )
        return RemunerationSummary(
            start_date=start_date,
            end_date=end_date,
            total_attendance=quantize_money(total_attendance),
            total_task_earnings=quantize_money(total_tasks),
            total_remuneration=quantize_money(total_attendance + total_tasks),
            workers=lines,
        )
