"""Overdue-return assessment and the violation register."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.config.settings import settings
from core.errors import NotFoundError, StateError, ValidationError
from core.logging.logger import logger
from core.utils.money import quantize_money, to_decimal
from domain.entities.order import ACTIVE_ORDER_STATUSES, Order
from domain.entities.violation import Violation, ViolationType
from shared.services.date_calculator import DateLike, ReturnAnalysis, ReturnStatus, analyze_return_status, parse_date


_EDITABLE_FIELDS = ("violation_type", "description", "penalty_amount")


@dataclass(frozen=True)
class OverdueAssessment:
    """How late a return is against the expected return date.

    ``overdue_days`` counts from the expected return date. A penalty is only
    due once the grace period is over.
    """

    analysis: ReturnAnalysis
    overdue_days: int
    penalty: Decimal

    @property
    def is_penalized(self) -> bool:
        return self.analysis.is_late


@dataclass
class OverdueReturnLine:
    order_id: int
    client_id: int
    client_name: str
    rental_end_date: date
    expected_return_date: date
    overdue_days: int
    return_status: ReturnStatus
    total_amount: Decimal
    amount_paid: Decimal
    estimated_penalty: Decimal


def assess_overdue(
    returned_on: DateLike,
    expected_return_date: DateLike,
    grace_days: Optional[int] = None,
    penalty_per_day: Any = None,
) -> OverdueAssessment:
    grace = settings.grace_days if grace_days is None else grace_days
    per_day = to_decimal(settings.overdue_penalty_per_day if penalty_per_day is None else penalty_per_day)

    analysis = analyze_return_status(returned_on, expected_return_date, grace)
    overdue_days = 0
    if analysis.actual_date is not None and analysis.planned_date is not None:
        overdue_days = max(0, (analysis.actual_date - analysis.planned_date).days)

    penalty = quantize_money(per_day * overdue_days) if analysis.is_late else Decimal("0.00")
    return OverdueAssessment(analysis=analysis, overdue_days=overdue_days, penalty=penalty)


class ViolationService:
    """Violation CRUD plus the overdue checks built on the return analysis."""

    def __init__(self, session: Session):
        self.session = session

    def overdue_violation_for(self, order: Order) -> Optional[Violation]:
        """Unsaved overdue-return violation for a returned order, or None when it was not late."""
        if order.actual_return_date is None:
            return None

        assessment = assess_overdue(order.actual_return_date, order.expected_return_date)
        if not assessment.is_penalized:
            return None

        return Violation(
            order_id=order.id,
            violation_type=ViolationType.OVERDUE_RETURN,
            description=f"Returned {assessment.overdue_days} day(s) late",
            penalty_amount=assessment.penalty,
            created_by="system",
        )

    def get_violation(self, violation_id: int) -> Violation:
        violation = self.session.get(Violation, violation_id)
        if violation is None:
            raise NotFoundError("Violation", violation_id)
        return violation

    def list_violations(
        self,
        order_id: Optional[int] = None,
        resolved: Optional[bool] = None,
        violation_type: Optional[ViolationType] = None,
    ) -> List[Violation]:
        query = select(Violation)
        if order_id is not None:
            query = query.where(Violation.order_id == order_id)
        if resolved is not None:
            query = query.where(Violation.resolved.is_(resolved))
        if violation_type is not None:
            query = query.where(Violation.violation_type == ViolationType(violation_type))
        query = query.order_by(Violation.created_at.desc(), Violation.id.desc())
        return list(self.session.execute(query).scalars().all())

    def create_violation(
        self,
        order_id: int,
        violation_type: ViolationType,
        description: str,
        penalty_amount: Any,
        created_by: Optional[str] = None,
    ) -> Violation:
        if self.session.get(Order, order_id) is None:
            raise NotFoundError("Order", order_id)
        penalty = self._validate_penalty(penalty_amount)

        violation = Violation(
            order_id=order_id,
            violation_type=ViolationType(violation_type),
            description=description,
            penalty_amount=penalty,
            created_by=created_by,
        )
        self.session.add(violation)
        self.session.commit()
        self.session.refresh(violation)

        logger.info(
            "Violation recorded",
            violation_id=violation.id,
            order_id=order_id,
            violation_type=violation.violation_type.value,
            penalty_amount=str(penalty),
        )
        return violation

    def update_violation(self, violation_id: int, changes: Dict[str, Any]) -> Violation:
        violation = self.get_violation(violation_id)
        if violation.resolved:
            raise StateError(f"Violation {violation_id} is resolved and can no longer be edited")

        for field_name in _EDITABLE_FIELDS:
            value = changes.get(field_name)
            if value is None:
                continue
            if field_name == "penalty_amount":
                value = self._validate_penalty(value)
            elif field_name == "violation_type":
                value = ViolationType(value)
            setattr(violation, field_name, value)

        self.session.commit()
        self.session.refresh(violation)
        logger.info("Violation updated", violation_id=violation.id, fields=sorted(changes))
        return violation

    def resolve_violation(
        self,
        violation_id: int,
        paid_amount: Any = 0,
        waived_amount: Any = 0,
        resolution_notes: Optional[str] = None,
        resolved_by: Optional[str] = None,
    ) -> Violation:
        """Closes a violation; paid plus waived may not exceed the penalty."""
        violation = self.get_violation(violation_id)
        if violation.resolved:
            raise StateError(f"Violation {violation_id} is already resolved")

        paid = quantize_money(paid_amount or 0)
        waived = quantize_money(waived_amount or 0)
        if paid < 0 or waived < 0:
            raise ValidationError("Paid and waived amounts must not be negative")
        if paid + waived > Decimal(violation.penalty_amount):
            raise ValidationError(
                "Paid and waived amounts exceed the penalty",
                {"penalty_amount": str(violation.penalty_amount), "paid_amount": str(paid), "waived_amount": str(waived)},
            )

        violation.resolved = True
        violation.resolved_at = datetime.now(timezone.utc)
        violation.resolved_by = resolved_by
        violation.paid_amount = paid
        violation.waived_amount = waived
        violation.resolution_notes = resolution_notes
        self.session.commit()
        self.session.refresh(violation)

        logger.info(
            "Violation resolved",
            violation_id=violation.id,
            paid_amount=str(paid),
            waived_amount=str(waived),
            resolved_by=resolved_by,
        )
        return violation

    def delete_violation(self, violation_id: int) -> None:
        violation = self.get_violation(violation_id)
        if violation.resolved:
            raise StateError(f"Violation {violation_id} is resolved and cannot be deleted")
        self.session.delete(violation)
        self.session.commit()
        logger.info("Violation deleted", violation_id=violation_id)

    def overdue_returns(self, as_of: Optional[date] = None) -> List[OverdueReturnLine]:
        """Orders still out with the client after their expected return date."""
        today = parse_date(as_of) or date.today()
        orders = self.session.execute(
            select(Order)
            .where(Order.status.in_(ACTIVE_ORDER_STATUSES))
            .where(Order.expected_return_date < today)
            .order_by(Order.expected_return_date, Order.id)
        ).scalars().all()

        lines = []
        for order in orders:
            assessment = assess_overdue(today, order.expected_return_date)
            lines.append(OverdueReturnLine(
                order_id=order.id,
                client_id=order.client_id,
                client_name=order.client.name if order.client else "",
                rental_end_date=order.rental_end_date,
                expected_return_date=order.expected_return_date,
                overdue_days=assessment.overdue_days,
                return_status=assessment.analysis.status,
                total_amount=Decimal(order.total_amount or 0),
                amount_paid=Decimal(order.amount_paid or 0),
                estimated_penalty=assessment.penalty,
            ))
        return lines

    @staticmethod
    def _validate_penalty(value: Any) -> Decimal:
        try:
            penalty = quantize_money(value)
        except ValueError as e:
            raise ValidationError(str(e))
        if penalty < 0:
            raise ValidationError("Penalty amount must not be negative", {"penalty_amount": str(penalty)})
        return penalty
