"""Rental order and its line items."""

import enum
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, Numeric, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base


class OrderStatus(str, enum.Enum):
    """Order lifecycle states."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)


# Statuses whose items are physically out with the client
ACTIVE_ORDER_STATUSES = (OrderStatus.CONFIRMED, OrderStatus.IN_PROGRESS)


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Order(Base):
    """Rental order.

    ``total_amount`` is the quoted charge (less an approved discount). Return
    and cancellation pricing never rewrite it: the amount actually billed
    lives in ``adjusted_amount`` together with its ``adjustment_difference``.
    """

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)

    # Rental period
    order_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    rental_start_date = Column(Date, nullable=False)
    rental_end_date = Column(Date, nullable=False)
    expected_return_date = Column(Date, nullable=False)
    actual_return_date = Column(Date, nullable=True)

    # Billing
    total_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    amount_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    payment_status = Column(
        Enum(PaymentStatus, name="payment_status", values_callable=_enum_values, native_enum=False),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    # Quote terms kept so a date change can re-quote the same way
    discount_percentage = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    tax_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    discount_amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    discount_applied = Column(Boolean, nullable=False, default=False)
    discount_approved_by = Column(String(100), nullable=True)
    default_chargeable_days = Column(Integer, nullable=False, default=1)
    chargeable_days = Column(Integer, nullable=False, default=1)
    adjusted_amount = Column(Numeric(12, 2), nullable=True)
    adjustment_difference = Column(Numeric(12, 2), nullable=True)

    status = Column(
        Enum(OrderStatus, name="order_status", values_callable=_enum_values, native_enum=False),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True,
    )
    notes = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)

    # Optimistic concurrency: a stale write raises StaleDataError
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    client = relationship("Client", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan", lazy="selectin")
    tasks = relationship("WorkerTask", back_populates="order", cascade="all, delete-orphan")
    violations = relationship("Violation", back_populates="order", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version}

    @property
    def remaining_amount(self) -> Decimal:
        billed = self.adjusted_amount if self.adjusted_amount is not None else self.total_amount
        return Decimal(billed or 0) - Decimal(self.amount_paid or 0)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, status='{self.status.value if self.status else None}', total={self.total_amount})>"


class OrderItem(Base):
    """Line item; ``unit_price`` is a snapshot taken when the order was placed."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", lazy="joined")

    @property
    def total_price(self) -> Decimal:
        return Decimal(self.unit_price or 0) * int(self.quantity or 0)

    @property
    def product_name(self) -> str:
        return self.product.name if self.product else ""

    def __repr__(self) -> str:
        return f"<OrderItem(order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"
