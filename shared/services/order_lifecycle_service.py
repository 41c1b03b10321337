"""Order status state machine with pricing and task side effects."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, FrozenSet, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.errors import ConflictError, NotFoundError, RentFlowError, StateError, ValidationError
from core.logging.logger import logger
from domain.entities.order import Order, OrderStatus
from domain.entities.violation import Violation
from domain.entities.worker_task import TaskType, WorkerTask
from shared.services.date_calculator import DateLike, parse_date
from shared.services.inventory_service import InventoryService, ProductAvailability
from shared.services.pricing_adjuster import PricingAdjuster, PricingAdjustment
from shared.services.task_amount_calculator import TaskAmountCalculator, line_items_from_order
from shared.services.violation_service import ViolationService
from shared.services.worker_task_service import WorkerTaskService


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}),
    OrderStatus.IN_PROGRESS: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# Task recorded automatically when an order enters the status
TASK_ON_ENTRY: Dict[OrderStatus, TaskType] = {
    OrderStatus.IN_PROGRESS: TaskType.ISSUING,
    OrderStatus.COMPLETED: TaskType.RECEIVING,
}


@dataclass
class StatusChangeRequest:
    status: OrderStatus
    actual_return_date: DateLike = None
    chargeable_days: Optional[int] = None
    workers: Sequence[Any] = ()
    task_amount: Optional[Decimal] = None
    vehicle_type: Optional[str] = None
    transport_type: Optional[str] = None
    task_notes: Optional[str] = None
    changed_by: Optional[str] = None


@dataclass
class TransitionResult:
    order: Order
    previous_status: OrderStatus
    adjustment: Optional[PricingAdjustment] = None
    task: Optional[WorkerTask] = None
    task_error: Optional[str] = None
    inventory: List[ProductAvailability] = field(default_factory=list)
    violations: List[Violation] = field(default_factory=list)

    @property
    def adjusted_amount(self) -> Decimal:
        if self.adjustment is not None:
            return self.adjustment.adjusted_amount
        return Decimal(self.order.total_amount or 0)

    @property
    def difference(self) -> Decimal:
        if self.adjustment is not None:
            return self.adjustment.difference
        return Decimal("0.00")

    @property
    def message(self) -> str:
        text = f"Order {self.order.id}: {self.previous_status.value} -> {self.order.status.value}"
        if self.adjustment is not None:
            text += f". {self.adjustment.describe()}"
        if self.order.status == OrderStatus.COMPLETED and self.order.actual_return_date is None:
            text += ". Return date missing"
        for violation in self.violations:
            text += f". Overdue penalty of {violation.penalty_amount}"
        return text


def available_transitions(status: OrderStatus) -> FrozenSet[OrderStatus]:
    return ORDER_TRANSITIONS.get(OrderStatus(status), frozenset())


def ensure_transition(current: OrderStatus, target: OrderStatus) -> None:
    current = OrderStatus(current)
    target = OrderStatus(target)
    if target not in available_transitions(current):
        allowed = sorted(s.value for s in available_transitions(current))
        raise StateError(
            f"Cannot change order status from {current.value} to {target.value}",
            {"current": current.value, "requested": target.value, "allowed": allowed},
        )


class OrderLifecycleCoordinator:
    """
    Applies status transitions to orders.

    The status change and its pricing are committed first. Recording the
    worker task that goes with the transition is a second step: if it fails
    the status change stands and the failure is returned in ``task_error``.
    """

    def __init__(
        self,
        session: Session,
        pricing: Optional[PricingAdjuster] = None,
        task_calculator: Optional[TaskAmountCalculator] = None,
        task_service: Optional[WorkerTaskService] = None,
        inventory: Optional[InventoryService] = None,
        violations: Optional[ViolationService] = None,
    ):
        self.session = session
        self.pricing = pricing or PricingAdjuster()
        self.task_calculator = task_calculator or TaskAmountCalculator()
        self.task_service = task_service or WorkerTaskService(session)
        self.inventory = inventory or InventoryService(session)
        self.violations = violations or ViolationService(session)

    def get_order(self, order_id: int) -> Order:
        order = self.session.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def price(self, order: Order, request: StatusChangeRequest) -> Optional[PricingAdjustment]:
        """Pricing effect of moving ``order`` into ``request.status``; None when there is none."""
        target = OrderStatus(request.status)
        if target == OrderStatus.COMPLETED:
            return self.pricing.adjust_for_return(
                full_planned_amount=order.total_amount,
                default_chargeable_days=order.default_chargeable_days,
                rental_start_date=order.rental_start_date,
                actual_return_date=request.actual_return_date,
                chargeable_days=request.chargeable_days,
            )
        if target == OrderStatus.CANCELLED:
            return self.pricing.adjust_for_cancellation(order.total_amount, order.default_chargeable_days)
        return None

    def preview(self, order_id: int, request: StatusChangeRequest) -> Optional[PricingAdjustment]:
        order = self.get_order(order_id)
        ensure_transition(order.status, request.status)
        return self.price(order, request)

    def change_status(self, order_id: int, request: StatusChangeRequest) -> TransitionResult:
        order = self.get_order(order_id)
        target = OrderStatus(request.status)
        previous = order.status
        ensure_transition(previous, target)

        if target == OrderStatus.COMPLETED and request.actual_return_date is None:
            raise ValidationError("Actual return date is required to complete an order")

        adjustment = self.price(order, request)
        order.status = target

        violations: List[Violation] = []
        if target == OrderStatus.COMPLETED:
            order.actual_return_date = parse_date(request.actual_return_date)
            order.chargeable_days = adjustment.chargeable_days
            order.adjusted_amount = adjustment.adjusted_amount
            order.adjustment_difference = adjustment.difference
            if order.actual_return_date is None:
                # Keep what was entered so the return can be corrected later
                line = f"Return date not recorded: {request.actual_return_date!r} could not be read"
                order.notes = f"{order.notes}\n{line}" if order.notes else line
            violation = self.violations.overdue_violation_for(order)
            if violation is not None:
                self.session.add(violation)
                violations.append(violation)
        elif target == OrderStatus.CANCELLED:
            order.chargeable_days = 0
            order.adjusted_amount = adjustment.adjusted_amount
            order.adjustment_difference = adjustment.difference

        try:
            self.session.commit()
        except StaleDataError:
            self.session.rollback()
            raise ConflictError(
                f"Order {order_id} was changed by another request",
                {"order_id": order_id},
            )
        self.session.refresh(order)

        if adjustment is not None and adjustment.fallback:
            logger.warning(
                "Order priced without adjustment",
                order_id=order.id,
                calculation_error=adjustment.error,
            )
        logger.info(
            "Order status changed",
            order_id=order.id,
            previous_status=previous.value,
            new_status=target.value,
            adjusted_amount=str(adjustment.adjusted_amount) if adjustment else None,
            difference=str(adjustment.difference) if adjustment else None,
            changed_by=request.changed_by,
        )

        result = TransitionResult(
            order=order,
            previous_status=previous,
            adjustment=adjustment,
            violations=violations,
        )
        if violations:
            logger.info(
                "Overdue return violation raised",
                order_id=order.id,
                penalty_amount=str(violations[0].penalty_amount),
            )

        if target.is_terminal:
            result.inventory = self.inventory.reconcile(order)

        task_type = TASK_ON_ENTRY.get(target)
        if task_type is not None:
            result.task, result.task_error = self._record_task(order, task_type, request)

        return result

    def _record_task(self, order: Order, task_type: TaskType, request: StatusChangeRequest):
        try:
            if request.task_amount is not None:
                amount = request.task_amount
            else:
                amount = self.task_calculator.calculate(
                    line_items_from_order(order),
                    task_type,
                    vehicle_type=request.vehicle_type,
                    transport_type=request.transport_type,
                )
            task = self.task_service.create_task(
                order_id=order.id,
                task_type=task_type,
                workers=request.workers,
                task_amount=amount,
                notes=request.task_notes,
                completed_at=datetime.now(timezone.utc),
                created_by=request.changed_by,
            )
            return task, None
        except (RentFlowError, SQLAlchemyError, ValueError) as e:
            self.session.rollback()
            message = e.message if isinstance(e, RentFlowError) else str(e)
            logger.warning(
                "Worker task was not recorded after status change",
                order_id=order.id,
                task_type=task_type.value,
                task_error=message,
            )
            return None, message
