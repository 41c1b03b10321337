"""Configured per-unit rates for worker tasks."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Numeric, Enum
from sqlalchemy.sql import func

from .base import Base
from .worker_task import TaskType


class TaskRate(Base):
    """Rate used to suggest a task amount from a quantity (e.g. 0.30 per chair)."""

    __tablename__ = "task_rates"

    id = Column(Integer, primary_key=True, index=True)
    task_type = Column(
        Enum(TaskType, name="task_type", values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        index=True,
    )
    task_name = Column(String(200), nullable=False)
    rate_per_unit = Column(Numeric(12, 2), nullable=False)
    unit = Column(String(50), nullable=False)  # per chair, per tent, per load, ...
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<TaskRate id={self.id} type={self.task_type} rate={self.rate_per_unit} {self.unit}>"
