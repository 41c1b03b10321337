"""Rentable product catalogue."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String, DateTime, Boolean, Numeric
from sqlalchemy.sql import func

from .base import Base


class Product(Base):
    """A rentable item kind (chairs, tables, tents, ...).

    How many units are currently rented out is not stored here; it is
    derived from active order items by ``InventoryService``.
    """

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=True)  # free text, classified for task rates
    rental_price = Column(Numeric(12, 2), nullable=False, default=0)  # per unit per day
    quantity_in_stock = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name} price={self.rental_price}>"
