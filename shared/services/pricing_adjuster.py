"""Billing adjustments for early returns, late returns and cancellations."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from core.config.settings import settings
from core.logging.logger import logger
from core.utils.money import quantize_money, to_decimal
from shared.services.date_calculator import DateLike, usage_days


class AdjustmentKind(str, enum.Enum):
    NO_CHANGE = "no_change"
    EARLY_RETURN = "early_return"
    LATE_RETURN = "late_return"
    CANCELLATION = "cancellation"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class PricingAdjustment:
    """Result of a pricing adjustment.

    ``difference`` is negative for a refund and positive for an additional
    charge. ``fallback`` is set when the input could not be used; the
    amount is then left unchanged and ``error`` says why.
    """

    original_amount: Decimal
    adjusted_amount: Decimal
    chargeable_days: int
    default_chargeable_days: int
    daily_rate: Decimal
    kind: AdjustmentKind
    extra_days: int = 0
    fallback: bool = False
    error: Optional[str] = None

    @property
    def difference(self) -> Decimal:
        return self.adjusted_amount - self.original_amount

    @property
    def is_refund(self) -> bool:
        return self.difference < 0

    @property
    def is_additional_charge(self) -> bool:
        return self.difference > 0

    def describe(self) -> str:
        """Human readable direction and magnitude of the adjustment."""
        magnitude = abs(self.difference)
        if self.kind == AdjustmentKind.CANCELLATION:
            return f"Cancellation fee of {self.adjusted_amount} (refund of {magnitude})"
        if self.kind == AdjustmentKind.FALLBACK:
            return f"No adjustment: {self.error}"
        if self.is_refund:
            return f"Refund of {magnitude} for early return after {self.chargeable_days} day(s)"
        if self.is_additional_charge:
            return f"Late return penalty of {magnitude} for {self.extra_days} extra day(s)"
        return "No adjustment"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original_amount": self.original_amount,
            "adjusted_amount": self.adjusted_amount,
            "difference": self.difference,
            "chargeable_days": self.chargeable_days,
            "default_chargeable_days": self.default_chargeable_days,
            "daily_rate": self.daily_rate,
            "kind": self.kind.value,
            "extra_days": self.extra_days,
            "fallback": self.fallback,
            "error": self.error,
            "message": self.describe(),
        }


class PricingAdjuster:
    """
    Computes the billable amount of an order once its real duration is known.

    The adjuster is a pure calculator: identical input always gives an
    identical result and nothing is persisted here.
    """

    def __init__(
        self,
        minimum_ratio: Optional[Decimal] = None,
        penalty_multiplier: Optional[Decimal] = None,
        cancellation_ratio: Optional[Decimal] = None,
    ):
        self.minimum_ratio = to_decimal(
            minimum_ratio if minimum_ratio is not None else settings.early_return_minimum_ratio
        )
        self.penalty_multiplier = to_decimal(
            penalty_multiplier if penalty_multiplier is not None else settings.late_return_penalty_multiplier
        )
        self.cancellation_ratio = to_decimal(
            cancellation_ratio if cancellation_ratio is not None else settings.cancellation_fee_ratio
        )

    @staticmethod
    def daily_rate(full_planned_amount: Decimal, default_chargeable_days: int) -> Decimal:
        return full_planned_amount / Decimal(max(1, default_chargeable_days))

    def adjust_for_days(
        self,
        full_planned_amount: Any,
        default_chargeable_days: int,
        calculated_days: int,
    ) -> PricingAdjustment:
        """
        Applies the return rules for a known billed duration.

        - fewer days than planned: pro-rata, but never below the minimum
          share (50%) of the planned charge;
        - more days than planned: every extra day at the daily rate times
          the penalty multiplier (150%);
        - same duration: unchanged.
        """
        full = to_decimal(full_planned_amount)
        default_days = max(1, int(default_chargeable_days or 1))
        days = max(1, int(calculated_days))
        rate = self.daily_rate(full, default_days)

        extra_days = 0
        if days < default_days:
            adjusted = max(full * self.minimum_ratio, days * rate)
            kind = AdjustmentKind.EARLY_RETURN
        elif days > default_days:
            extra_days = days - default_days
            adjusted = full + extra_days * rate * self.penalty_multiplier
            kind = AdjustmentKind.LATE_RETURN
        else:
            adjusted = full
            kind = AdjustmentKind.NO_CHANGE

        return PricingAdjustment(
            original_amount=quantize_money(full),
            adjusted_amount=quantize_money(adjusted),
            chargeable_days=days,
            default_chargeable_days=default_days,
            daily_rate=quantize_money(rate),
            kind=kind,
            extra_days=extra_days,
        )

    def adjust_for_return(
        self,
        full_planned_amount: Any,
        default_chargeable_days: int,
        rental_start_date: DateLike = None,
        actual_return_date: DateLike = None,
        chargeable_days: Optional[int] = None,
    ) -> PricingAdjustment:
        """
        Adjustment applied when an order is completed.

        An explicit ``chargeable_days`` wins over the date-derived duration.
        Unusable input degrades to "no adjustment" with ``fallback=True``.
        """
        try:
            full = to_decimal(full_planned_amount)
        except ValueError as e:
            return self._fallback(Decimal("0"), default_chargeable_days, str(e))

        if chargeable_days is not None:
            calculated_days = chargeable_days
        else:
            calculated_days = usage_days(rental_start_date, actual_return_date)
            if calculated_days is None:
                return self._fallback(
                    full,
                    default_chargeable_days,
                    f"Cannot derive rental days from start={rental_start_date!r} return={actual_return_date!r}",
                )

        return self.adjust_for_days(full, default_chargeable_days, calculated_days)

    def adjust_for_cancellation(self, full_planned_amount: Any, default_chargeable_days: int = 1) -> PricingAdjustment:
        """Flat cancellation fee; the order is no longer billed by days."""
        try:
            full = to_decimal(full_planned_amount)
        except ValueError as e:
            return self._fallback(Decimal("0"), default_chargeable_days, str(e))

        default_days = max(1, int(default_chargeable_days or 1))
        return PricingAdjustment(
            original_amount=quantize_money(full),
            adjusted_amount=quantize_money(full * self.cancellation_ratio),
            chargeable_days=0,
            default_chargeable_days=default_days,
            daily_rate=quantize_money(self.daily_rate(full, default_days)),
            kind=AdjustmentKind.CANCELLATION,
        )

    def _fallback(self, full: Decimal, default_chargeable_days: int, error: str) -> PricingAdjustment:
        default_days = max(1, int(default_chargeable_days or 1))
        logger.warning(
            "Pricing adjustment fell back to the original amount",
            calculation_error=error,
            original_amount=str(full),
        )
        return PricingAdjustment(
            original_amount=quantize_money(full),
            adjusted_amount=quantize_money(full),
            chargeable_days=default_days,
            default_chargeable_days=default_days,
            daily_rate=quantize_money(self.daily_rate(full, default_days)),
            kind=AdjustmentKind.FALLBACK,
            fallback=True,
            error=error,
        )
