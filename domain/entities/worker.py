"""Workers and their attendance records."""

from decimal import Decimal

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class Worker(Base):
    """Laborer paid per task and/or per day.

    A ``daily_rate`` of 0 means the worker is paid by tasks only.
    """

    __tablename__ = "workers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    daily_rate = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    attendance = relationship("WorkerAttendance", back_populates="worker", cascade="all, delete-orphan")

    def hourly_rate(self, hours_per_day: int = 8) -> Decimal:
        return Decimal(self.daily_rate or 0) / Decimal(hours_per_day)

    def __repr__(self) -> str:
        return f"<Worker id={self.id} name={self.name} daily_rate={self.daily_rate}>"


class WorkerAttendance(Base):
    """One day of time-based work; hours are optional (full day when empty)."""

    __tablename__ = "worker_attendance"
    __table_args__ = (
        UniqueConstraint("worker_id", "date", name="uq_worker_attendance_worker_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="CASCADE"), nullable=False, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    date = Column(Date, nullable=False, index=True)
    hours_worked = Column(Numeric(5, 2), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    worker = relationship("Worker", back_populates="attendance")

    def __repr__(self) -> str:
        return f"<WorkerAttendance worker_id={self.worker_id} date={self.date} hours={self.hours_worked}>"
