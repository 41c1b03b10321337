"""Recorded units of labor tied to an order."""

import enum
from typing import List

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class TaskType(str, enum.Enum):
    """Fixed vocabulary of worker tasks."""
    ISSUING = "issuing"
    RECEIVING = "receiving"
    LOADING = "loading"
    UNLOADING = "unloading"
    TRANSPORT = "transport"
    ARRANGING_PICKUP = "arranging_pickup"
    LOADING_RETURNS = "loading_returns"
    TRANSPORT_RETURNS = "transport_returns"
    UNLOADING_RETURNS = "unloading_returns"
    STORING = "storing"
    OTHER = "other"


class WorkerTask(Base):
    """
    A task performed for an order.

    ``task_amount`` is the amount for the whole task, not per worker; only
    assignments with ``present=True`` are paid.
    """

    __tablename__ = "worker_tasks"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    task_type = Column(
        Enum(TaskType, name="task_type", values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        index=True,
    )
    task_amount = Column(Numeric(12, 2), nullable=False)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)
    created_by = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="tasks")
    workers = relationship(
        "WorkerTaskAssignment",
        back_populates="task",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="WorkerTaskAssignment.id",
    )

    @property
    def present_workers(self) -> List["WorkerTaskAssignment"]:
        return [w for w in self.workers if w.present]

    def __repr__(self) -> str:
        return f"<WorkerTask(id={self.id}, type='{self.task_type.value if self.task_type else None}', amount={self.task_amount})>"


class WorkerTaskAssignment(Base):
    __tablename__ = "worker_task_assignments"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("worker_tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="RESTRICT"), nullable=False, index=True)
    present = Column(Boolean, nullable=False, default=True)

    task = relationship("WorkerTask", back_populates="workers")
    worker = relationship("Worker", lazy="joined")

    @property
    def worker_name(self) -> str:
        return self.worker.name if self.worker else ""

    def __repr__(self) -> str:
        return f"<WorkerTaskAssignment task_id={self.task_id} worker_id={self.worker_id} present={self.present}>"
