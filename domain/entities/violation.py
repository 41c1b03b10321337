"""Penalties raised against an order (late return, damage, missing items)."""

import enum
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class ViolationType(str, enum.Enum):
    OVERDUE_RETURN = "overdue_return"
    DAMAGED_ITEM = "damaged_item"
    MISSING_ITEM = "missing_item"
    OTHER = "other"


class Violation(Base):
    """
    A penalty owed by the client of an order.

    Overdue-return violations are raised automatically when an order is
    completed after its grace period; the rest are entered by staff. A
    resolved violation is frozen.
    """

    __tablename__ = "violations"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    violation_type = Column(
        Enum(ViolationType, name="violation_type", values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        index=True,
    )
    description = Column(Text, nullable=False)
    penalty_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))

    resolved = Column(Boolean, nullable=False, default=False, index=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolved_by = Column(String(100), nullable=True)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    waived_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    resolution_notes = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="violations")

    @property
    def outstanding_amount(self) -> Decimal:
        if self.resolved:
            return Decimal("0.00")
        return Decimal(self.penalty_amount or 0)

    def __repr__(self) -> str:
        return f"<Violation id={self.id} order_id={self.order_id} type={self.violation_type} penalty={self.penalty_amount}>"
