"""
Task rate persistence service
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import NotFoundError, StateError
from core.logging.logger import logger
from domain.entities.task_rate import TaskRate
from domain.entities.worker_task import TaskType
from shared.services.task_amount_calculator import suggest_from_task_rate
from apps.api.schemas import TaskRateCreate, TaskRateUpdate


class TaskRateServiceDB:
    def __init__(self, db_session: Session):
        self.db = db_session

    def create_rate(self, rate_data: TaskRateCreate) -> TaskRate:
        rate = TaskRate(**rate_data.model_dump())
        self.db.add(rate)
        self.db.commit()
        self.db.refresh(rate)
        logger.info("Task rate created", task_rate_id=rate.id, task_type=rate.task_type.value)
        return rate

    def get_rate(self, rate_id: int) -> TaskRate:
        rate = self.db.get(TaskRate, rate_id)
        if rate is None:
            raise NotFoundError("Task rate", rate_id)
        return rate

    def list_rates(self, task_type: Optional[TaskType] = None, active_only: bool = False) -> List[TaskRate]:
        query = select(TaskRate)
        if task_type is not None:
            query = query.where(TaskRate.task_type == TaskType(task_type))
        if active_only:
            query = query.where(TaskRate.is_active.is_(True))
        return list(self.db.execute(query.order_by(TaskRate.task_type, TaskRate.task_name)).scalars().all())

    def update_rate(self, rate_id: int, rate_data: TaskRateUpdate) -> TaskRate:
        rate = self.get_rate(rate_id)
        changes: Dict[str, Any] = {
            k: v for k, v in rate_data.model_dump(exclude_unset=True).items() if v is not None or k == "description"
        }
        for field, value in changes.items():
            setattr(rate, field, value)
        self.db.commit()
        self.db.refresh(rate)
        logger.info("Task rate updated", task_rate_id=rate.id, fields=sorted(changes))
        return rate

    def deactivate_rate(self, rate_id: int) -> TaskRate:
        """Rates are never removed, only taken out of use."""
        rate = self.get_rate(rate_id)
        rate.is_active = False
        self.db.commit()
        self.db.refresh(rate)
        logger.info("Task rate deactivated", task_rate_id=rate.id)
        return rate

    def suggest(self, rate_id: int, quantity: int) -> Dict[str, Any]:
        rate = self.get_rate(rate_id)
        if not rate.is_active:
            raise StateError(f"Task rate {rate_id} is inactive")
        return {
            "task_rate_id": rate.id,
            "task_type": rate.task_type,
            "quantity": quantity,
            "rate_per_unit": rate.rate_per_unit,
            "unit": rate.unit,
            "suggested_amount": suggest_from_task_rate(rate.rate_per_unit, quantity),
        }
