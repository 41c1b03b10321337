"""Product availability derived from active orders."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.logging.logger import logger
from domain.entities.order import ACTIVE_ORDER_STATUSES, Order, OrderItem
from domain.entities.product import Product


@dataclass(frozen=True)
class ProductAvailability:
    product_id: int
    name: str
    quantity_in_stock: int
    quantity_rented: int

    @property
    def quantity_available(self) -> int:
        return max(0, self.quantity_in_stock - self.quantity_rented)


class InventoryService:
    """
    Rented quantities are a query over order items of confirmed and
    in-progress orders, never a stored counter.
    """

    def __init__(self, session: Session):
        self.session = session

    def _rented_query(self):
        return (
            select(OrderItem.product_id, func.coalesce(func.sum(OrderItem.quantity), 0))
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.status.in_(ACTIVE_ORDER_STATUSES))
            .group_by(OrderItem.product_id)
        )

    def rented_quantities(self, product_ids: Optional[Iterable[int]] = None) -> Dict[int, int]:
        query = self._rented_query()
        if product_ids is not None:
            query = query.where(OrderItem.product_id.in_(list(product_ids)))
        return {product_id: int(total) for product_id, total in self.session.execute(query).all()}

    def rented_quantity(self, product_id: int) -> int:
        return self.rented_quantities([product_id]).get(product_id, 0)

    def availability(self, product_ids: Optional[Iterable[int]] = None) -> List[ProductAvailability]:
        query = select(Product).order_by(Product.name, Product.id)
        if product_ids is not None:
            query = query.where(Product.id.in_(list(product_ids)))
        products = self.session.execute(query).scalars().all()
        rented = self.rented_quantities([p.id for p in products])
        return [
            ProductAvailability(
                product_id=p.id,
                name=p.name,
                quantity_in_stock=int(p.quantity_in_stock or 0),
                quantity_rented=rented.get(p.id, 0),
            )
            for p in products
        ]

    def reconcile(self, order: Order) -> List[ProductAvailability]:
        """Refreshed availability for the products of an order that left the active set."""
        product_ids = {item.product_id for item in order.items}
        snapshot = self.availability(product_ids)
        logger.info(
            "Inventory reconciled",
            order_id=order.id,
            order_status=order.status.value,
            products={a.product_id: a.quantity_available for a in snapshot},
        )
        return snapshot
