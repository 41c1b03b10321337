"""Order quoting: totals and payload validation."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Sequence

from core.utils.money import quantize_money, to_decimal
from shared.services.date_calculator import calculate_chargeable_days, parse_date


@dataclass(frozen=True)
class QuoteLine:
    quantity: int
    unit_price: Decimal
    days: Optional[int] = None


@dataclass(frozen=True)
class OrderTotals:
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    chargeable_days: int


def calculate_order_totals(
    items: Sequence[QuoteLine],
    start_date: Any,
    end_date: Any,
    discount_percentage: Any = 0,
    tax_rate: Any = 0,
    chargeable_days: Optional[int] = None,
) -> OrderTotals:
    """
    Quote for a set of line items.

    subtotal = sum(quantity * unit_price * days), the discount is a
    percentage of the subtotal and tax is charged on the discounted amount.
    ``chargeable_days`` overrides the days derived from the dates.
    """
    days = chargeable_days or calculate_chargeable_days(start_date, end_date, 1)
    if not items:
        zero = Decimal("0.00")
        return OrderTotals(zero, zero, zero, zero, days)

    subtotal = Decimal("0")
    for item in items:
        item_days = item.days or days
        subtotal += int(item.quantity) * to_decimal(item.unit_price) * item_days

    discount = subtotal * to_decimal(discount_percentage or 0) / 100
    taxable = subtotal - discount
    tax = taxable * to_decimal(tax_rate or 0) / 100
    total = subtotal - discount + tax

    return OrderTotals(
        subtotal=quantize_money(subtotal),
        discount_amount=quantize_money(discount),
        tax_amount=quantize_money(tax),
        total_amount=quantize_money(total),
        chargeable_days=days,
    )


def validate_order_payload(
    client_id: Any,
    start_date: Any,
    end_date: Any,
    items: Iterable[Any],
) -> List[str]:
    """Returns a list of human readable problems; empty means valid.

    A same-day rental is allowed; an end before the start is not.
    """
    errors = []
    if not client_id:
        errors.append("Client is required")

    start: Optional[date] = parse_date(start_date)
    end: Optional[date] = parse_date(end_date)
    if start_date is None:
        errors.append("Rental start date is required")
    elif start is None:
        errors.append("Invalid rental start date")
    if end_date is None:
        errors.append("Rental end date is required")
    elif end is None:
        errors.append("Invalid rental end date")
    if start is not None and end is not None and end < start:
        errors.append("Rental end date must not be before start date")

    items = list(items or [])
    if not items:
        errors.append("At least one item is required")
    for index, item in enumerate(items, start=1):
        product_id = item.get("product_id") if isinstance(item, dict) else getattr(item, "product_id", None)
        quantity = item.get("quantity") if isinstance(item, dict) else getattr(item, "quantity", None)
        if not product_id:
            errors.append(f"Item {index}: Product ID is required")
        if not quantity or int(quantity) <= 0:
            errors.append(f"Item {index}: Quantity must be greater than 0")

    return errors
