"""Unit tests for order quoting and payload validation."""

from datetime import date
from decimal import Decimal

from shared.services.order_calculations import QuoteLine, calculate_order_totals, validate_order_payload


class TestOrderTotals:

    def test_subtotal_uses_chargeable_days(self):
        totals = calculate_order_totals(
            [QuoteLine(quantity=100, unit_price=Decimal("10")), QuoteLine(quantity=2, unit_price=Decimal("150"))],
            date(2024, 3, 1),
            date(2024, 3, 5),
        )
        assert totals.chargeable_days == 5
        assert totals.subtotal == Decimal("6500.00")
        assert totals.total_amount == Decimal("6500.00")

    def test_discount_then_tax(self):
        totals = calculate_order_totals(
            [QuoteLine(quantity=10, unit_price=Decimal("100"))],
            date(2024, 3, 1),
            date(2024, 3, 1),
            discount_percentage=10,
            tax_rate=16,
        )
        assert totals.subtotal == Decimal("1000.00")
        assert totals.discount_amount == Decimal("100.00")
        assert totals.tax_amount == Decimal("144.00")
        assert totals.total_amount == Decimal("1044.00")

    def test_chargeable_days_override(self):
        totals = calculate_order_totals(
            [QuoteLine(quantity=1, unit_price=Decimal("50"))],
            date(2024, 3, 1),
            date(2024, 3, 10),
            chargeable_days=2,
        )
        assert totals.total_amount == Decimal("100.00")

    def test_per_line_days(self):
        totals = calculate_order_totals(
            [QuoteLine(quantity=1, unit_price=Decimal("50"), days=1), QuoteLine(quantity=1, unit_price=Decimal("50"))],
            date(2024, 3, 1),
            date(2024, 3, 3),
        )
        assert totals.subtotal == Decimal("200.00")

    def test_no_items(self):
        totals = calculate_order_totals([], date(2024, 3, 1), date(2024, 3, 3))
        assert totals.total_amount == Decimal("0.00")
        assert totals.chargeable_days == 3


class TestPayloadValidation:

    def test_valid_payload(self):
        assert validate_order_payload(1, "2024-03-01", "2024-03-01", [{"product_id": 1, "quantity": 2}]) == []

    def test_collects_all_problems(self):
        errors = validate_order_payload(None, None, "nope", [])
        assert "Client is required" in errors
        assert "Rental start date is required" in errors
        assert "Invalid rental end date" in errors
        assert "At least one item is required" in errors

    def test_end_before_start(self):
        errors = validate_order_payload(1, date(2024, 3, 5), date(2024, 3, 1), [{"product_id": 1, "quantity": 1}])
        assert errors == ["Rental end date must not be before start date"]

    def test_item_checks(self):
        errors = validate_order_payload(1, date(2024, 3, 1), date(2024, 3, 2), [{"product_id": None, "quantity": 0}])
        assert "Item 1: Product ID is required" in errors
        assert "Item 1: Quantity must be greater than 0" in errors
