"""
API router for products
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from core.database.connection import get_db
from apps.api.schemas import ProductCreate, ProductResponse, ProductUpdate
from apps.api.services.product_service_db import ProductServiceDB

router = APIRouter(prefix="/products", tags=["products"])


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(product_data: ProductCreate, db: Session = Depends(get_db)):
    """Create a product; a new product has nothing rented out."""
    service = ProductServiceDB(db)
    product = service.create_product(product_data)
    return service.with_availability([product])[0]


@router.get("", response_model=List[ProductResponse])
def list_products(
    category: Optional[str] = Query(None, description="Category filter"),
    active_only: bool = Query(False, description="Only active products"),
    db: Session = Depends(get_db),
):
    """Products with rented and available quantities derived from active orders."""
    service = ProductServiceDB(db)
    return service.with_availability(service.list_products(category, active_only))


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, db: Session = Depends(get_db)):
    service = ProductServiceDB(db)
    return service.with_availability([service.get_product(product_id)])[0]


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(product_id: int, product_data: ProductUpdate, db: Session = Depends(get_db)):
    service = ProductServiceDB(db)
    return service.with_availability([service.update_product(product_id, product_data)])[0]


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(product_id: int, db: Session = Depends(get_db)):
    """Products that appear on an order are kept; deactivate them instead."""
    ProductServiceDB(db).delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
