"""
Product catalogue service with derived availability
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from core.errors import ConflictError, NotFoundError, ValidationError
from core.logging.logger import logger
from domain.entities.order import OrderItem
from domain.entities.product import Product
from shared.services.inventory_service import InventoryService
from apps.api.schemas import ProductCreate, ProductUpdate


class ProductServiceDB:
    """Products plus rented / available quantities computed from active orders."""

    def __init__(self, db_session: Session):
        self.db = db_session
        self.inventory = InventoryService(db_session)

    def create_product(self, product_data: ProductCreate) -> Product:
        product = Product(**product_data.model_dump())
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        logger.info("Product created", product_id=product.id, product_name=product.name)
        return product

    def get_product(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def list_products(self, category: Optional[str] = None, active_only: bool = False) -> List[Product]:
        query = select(Product)
        if category:
            query = query.where(Product.category == category)
        if active_only:
            query = query.where(Product.is_active.is_(True))
        return list(self.db.execute(query.order_by(Product.name, Product.id)).scalars().all())

    def update_product(self, product_id: int, product_data: ProductUpdate) -> Product:
        """Partial update; stock may not drop below what is rented out right now."""
        product = self.get_product(product_id)
        changes = {k: v for k, v in product_data.model_dump(exclude_unset=True).items() if v is not None or k == "category"}

        stock = changes.get("quantity_in_stock")
        if stock is not None:
            rented = self.inventory.rented_quantity(product.id)
            if stock < rented:
                raise ValidationError(
                    f"{product.name}: {rented} units are rented out, stock cannot be {stock}",
                    {"quantity_in_stock": stock, "quantity_rented": rented},
                )

        for field, value in changes.items():
            setattr(product, field, value)
        self.db.commit()
        self.db.refresh(product)
        logger.info("Product updated", product_id=product.id, fields=sorted(changes))
        return product

    def delete_product(self, product_id: int) -> None:
        """Deletes a product no order refers to; ordered products can only be deactivated."""
        product = self.get_product(product_id)
        references = self.db.execute(
            select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
        ).scalar_one()
        if references:
            raise ConflictError(
                f"{product.name} appears on {references} order item(s); deactivate it instead",
                {"product_id": product_id, "order_items": references},
            )
        self.db.delete(product)
        self.db.commit()
        logger.info("Product deleted", product_id=product_id)

    def with_availability(self, products: List[Product]) -> List[Dict[str, Any]]:
        rented = self.inventory.rented_quantities([p.id for p in products])
        result = []
        for product in products:
            quantity_rented = rented.get(product.id, 0)
            result.append({
                "id": product.id,
                "name": product.name,
                "category": product.category,
                "rental_price": product.rental_price,
                "quantity_in_stock": product.quantity_in_stock,
                "is_active": product.is_active,
                "quantity_rented": quantity_rented,
                "quantity_available": max(0, int(product.quantity_in_stock or 0) - quantity_rented),
            })
        return result
