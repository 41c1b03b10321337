"""
Order persistence service: quoting, filtering, payments and discounts
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from core.config.settings import settings
from core.errors import ConflictError, NotFoundError, StateError, ValidationError
from core.logging.logger import logger
from core.utils.money import quantize_money
from domain.entities.client import Client
from domain.entities.order import Order, OrderItem, OrderStatus, PaymentStatus
from domain.entities.product import Product
from shared.services.date_calculator import ReturnAnalysis, ReturnStatus, analyze_return_status, calculate_chargeable_days
from shared.services.inventory_service import InventoryService
from shared.services.order_calculations import QuoteLine, calculate_order_totals, validate_order_payload
from apps.api.schemas import OrderCreate, OrderUpdate


def payment_status_for(amount_paid: Decimal, billed_amount: Decimal) -> PaymentStatus:
    if amount_paid >= billed_amount:
        return PaymentStatus.PAID
    if amount_paid > 0:
        return PaymentStatus.PARTIALLY_PAID
    return PaymentStatus.PENDING


class OrderServiceDB:
    """Order CRUD. Status changes live in OrderLifecycleCoordinator."""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.inventory = InventoryService(db_session)

    def _commit(self, order: Order) -> Order:
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise ConflictError(f"Order {order.id} was changed by another request", {"order_id": order.id})
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> Order:
        order = self.db.get(Order, order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def create_order(self, order_data: OrderCreate) -> Order:
        errors = validate_order_payload(
            order_data.client_id,
            order_data.rental_start_date,
            order_data.rental_end_date,
            order_data.items,
        )
        if errors:
            raise ValidationError(errors[0], {"errors": errors})

        if self.db.get(Client, order_data.client_id) is None:
            raise NotFoundError("Client", order_data.client_id)

        product_ids = [item.product_id for item in order_data.items]
        products = {
            p.id: p for p in self.db.execute(select(Product).where(Product.id.in_(product_ids))).scalars().all()
        }
        rented = self.inventory.rented_quantities(product_ids)

        requested: Dict[int, int] = {}
        for item in order_data.items:
            if item.product_id not in products:
                raise NotFoundError("Product", item.product_id)
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
        for product_id, quantity in requested.items():
            product = products[product_id]
            available = int(product.quantity_in_stock or 0) - rented.get(product_id, 0)
            if quantity > available:
                raise ValidationError(
                    f"Only {max(0, available)} of {product.name} available",
                    {"product_id": product_id, "requested": quantity, "available": max(0, available)},
                )

        days = order_data.chargeable_days or calculate_chargeable_days(
            order_data.rental_start_date, order_data.rental_end_date
        )
        # Prices are snapshotted here and never recomputed from the catalogue
        items = [
            OrderItem(product_id=item.product_id, quantity=item.quantity, unit_price=products[item.product_id].rental_price)
            for item in order_data.items
        ]
        tax_rate = order_data.tax_rate if order_data.tax_rate is not None else settings.default_tax_rate
        totals = calculate_order_totals(
            [QuoteLine(quantity=i.quantity, unit_price=i.unit_price) for i in items],
            order_data.rental_start_date,
            order_data.rental_end_date,
            discount_percentage=order_data.discount_percentage,
            tax_rate=tax_rate,
            chargeable_days=days,
        )

        order = Order(
            client_id=order_data.client_id,
            rental_start_date=order_data.rental_start_date,
            rental_end_date=order_data.rental_end_date,
            expected_return_date=order_data.rental_end_date + timedelta(days=settings.expected_return_offset_days),
            total_amount=totals.total_amount,
            amount_paid=Decimal("0.00"),
            payment_status=PaymentStatus.PENDING,
            discount_percentage=order_data.discount_percentage,
            tax_rate=tax_rate,
            discount_amount=totals.discount_amount,
            discount_applied=totals.discount_amount > 0,
            default_chargeable_days=days,
            chargeable_days=days,
            status=OrderStatus.PENDING,
            notes=order_data.notes,
            location=order_data.location,
            items=items,
        )
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)

        logger.info(
            "Order created",
            order_id=order.id,
            client_id=order.client_id,
            total_amount=str(order.total_amount),
            chargeable_days=days,
        )
        return order

    def list_orders(
        self,
        status: Optional[OrderStatus] = None,
        client_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Order]:
        """Orders whose rental period overlaps [start_date, end_date]."""
        query = select(Order)
        if status is not None:
            query = query.where(Order.status == OrderStatus(status))
        if client_id is not None:
            query = query.where(Order.client_id == client_id)
        if start_date is not None:
            query = query.where(Order.rental_end_date >= start_date)
        if end_date is not None:
            query = query.where(Order.rental_start_date <= end_date)
        query = query.order_by(Order.rental_start_date.desc(), Order.id.desc())
        return list(self.db.execute(query).scalars().all())

    @staticmethod
    def _requote(order: Order, start: date, end: date, days: int) -> Decimal:
        """Quote with the snapshotted prices and the terms the order was created with.

        A percentage discount is part of the quote and is recomputed here. A
        fixed discount counts only once approved; a pending request is
        subtracted when it is approved.
        """
        totals = calculate_order_totals(
            [QuoteLine(quantity=i.quantity, unit_price=i.unit_price) for i in order.items],
            start,
            end,
            discount_percentage=order.discount_percentage or 0,
            tax_rate=order.tax_rate or 0,
            chargeable_days=days,
        )
        if Decimal(order.discount_percentage or 0) > 0:
            order.discount_amount = totals.discount_amount
            return totals.total_amount
        if order.discount_applied:
            return quantize_money(totals.total_amount - Decimal(order.discount_amount or 0))
        return totals.total_amount

    def update_order(self, order_id: int, order_data: OrderUpdate) -> Order:
        order = self.get_order(order_id)
        changes: Dict[str, Any] = order_data.model_dump(exclude_unset=True)
        if not changes:
            return order

        if order.status.is_terminal:
            raise StateError(
                f"Order {order_id} is {order.status.value} and can no longer be edited",
                {"status": order.status.value},
            )

        start = changes.get("rental_start_date", order.rental_start_date)
        end = changes.get("rental_end_date", order.rental_end_date)
        if start is None or end is None or end < start:
            raise ValidationError("Rental end date must not be before start date")

        for field, value in changes.items():
            setattr(order, field, value)

        if "rental_start_date" in changes or "rental_end_date" in changes:
            # Re-quote with the snapshotted prices
            days = calculate_chargeable_days(start, end)
            order.default_chargeable_days = days
            order.chargeable_days = days
            order.total_amount = self._requote(order, start, end, days)
            if "expected_return_date" not in changes and "rental_end_date" in changes:
                order.expected_return_date = end + timedelta(days=settings.expected_return_offset_days)

        self._commit(order)
        logger.info("Order updated", order_id=order.id, fields=sorted(changes))
        return order

    def update_payment(self, order_id: int, amount_paid: Decimal) -> Order:
        order = self.get_order(order_id)
        billed = order.adjusted_amount if order.adjusted_amount is not None else order.total_amount
        order.amount_paid = quantize_money(amount_paid)
        order.payment_status = payment_status_for(order.amount_paid, Decimal(billed or 0))
        self._commit(order)
        logger.info(
            "Order payment updated",
            order_id=order.id,
            amount_paid=str(order.amount_paid),
            payment_status=order.payment_status.value,
        )
        return order

    def request_discount(self, order_id: int, discount_amount: Decimal, reason: Optional[str] = None) -> Order:
        order = self.get_order(order_id)
        if order.status.is_terminal:
            raise StateError(f"Order {order_id} is {order.status.value}; discounts can no longer be requested")
        if order.discount_applied:
            raise StateError(f"Order {order_id} already has a discount applied")
        if discount_amount > Decimal(order.total_amount or 0):
            raise ValidationError(
                "Discount amount cannot exceed total amount",
                {"discount_amount": str(discount_amount), "total_amount": str(order.total_amount)},
            )

        order.discount_amount = quantize_money(discount_amount)
        order.discount_applied = False
        if reason:
            line = f"Discount request: {reason}"
            order.notes = f"{order.notes}\n{line}" if order.notes else line
        self._commit(order)
        logger.info("Discount requested", order_id=order.id, discount_amount=str(order.discount_amount))
        return order

    def approve_discount(self, order_id: int, approved: bool, approved_by: str) -> Order:
        """Approving subtracts the requested discount from the quote; rejecting clears it."""
        order = self.get_order(order_id)
        if order.discount_applied:
            raise StateError(f"Order {order_id} already has a discount applied")
        if not order.discount_amount or Decimal(order.discount_amount) <= 0:
            raise StateError(f"Order {order_id} has no pending discount request")

        if approved:
            order.total_amount = quantize_money(Decimal(order.total_amount) - Decimal(order.discount_amount))
            order.discount_applied = True
            order.discount_approved_by = approved_by
        else:
            order.discount_amount = Decimal("0.00")
            order.discount_applied = False
        self._commit(order)
        logger.info(
            "Discount decision recorded",
            order_id=order.id,
            approved=approved,
            approved_by=approved_by,
            total_amount=str(order.total_amount),
        )
        return order

    def return_status(self, order_id: int, as_of: Optional[date] = None) -> ReturnAnalysis:
        """Return classification against the expected return date.

        Uses the recorded actual return, else ``as_of`` (today by default).
        A completed order whose return date was never recorded is unknown.
        """
        order = self.get_order(order_id)
        if order.status == OrderStatus.COMPLETED and order.actual_return_date is None:
            return ReturnAnalysis(status=ReturnStatus.UNKNOWN, planned_date=order.expected_return_date)
        actual = order.actual_return_date or as_of or date.today()
        return analyze_return_status(actual, order.expected_return_date, settings.grace_days)
