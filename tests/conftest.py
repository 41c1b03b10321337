"""
pytest configuration for RentFlow tests
In-memory SQLite per test, service factories and an API client
"""
from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from core.database.connection import DatabaseManager, get_db
from domain.entities import Client, Order, OrderItem, OrderStatus, Product, Worker


@pytest.fixture
def db_manager():
    """Fresh in-memory database for every test."""
    manager = DatabaseManager("sqlite://")
    manager.create_schema()
    yield manager
    manager.close()


@pytest.fixture
def db_session(db_manager):
    session = db_manager.get_session()
    yield session
    session.close()


@pytest.fixture
def api_client(db_manager):
    """TestClient bound to the test database."""
    from apps.api.app import app

    def override_get_db():
        session = db_manager.get_session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would create the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-User-Role": "admin"}


@pytest.fixture
def make_client(db_session):
    def factory(name="Acme Events", phone="+254700000001"):
        client = Client(name=name, phone=phone)
        db_session.add(client)
        db_session.commit()
        return client
    return factory


@pytest.fixture
def make_product(db_session):
    def factory(name="Plastic chair", rental_price="10.00", quantity_in_stock=500, category=None):
        product = Product(
            name=name,
            category=category,
            rental_price=Decimal(rental_price),
            quantity_in_stock=quantity_in_stock,
            is_active=True,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return factory


@pytest.fixture
def make_worker(db_session):
    def factory(name="Worker", daily_rate="0", phone="+254711000000"):
        worker = Worker(name=name, phone=phone, daily_rate=Decimal(daily_rate), is_active=True)
        db_session.add(worker)
        db_session.commit()
        return worker
    return factory


@pytest.fixture
def make_order(db_session, make_client, make_product):
    """Order with one line item; amounts are set directly, not quoted."""
    def factory(
        total_amount="10000.00",
        default_chargeable_days=5,
        status=OrderStatus.PENDING,
        rental_start_date=date(2024, 3, 1),
        rental_end_date=date(2024, 3, 5),
        product=None,
        quantity=100,
    ):
        client = make_client()
        product = product or make_product()
        order = Order(
            client_id=client.id,
            rental_start_date=rental_start_date,
            rental_end_date=rental_end_date,
            expected_return_date=rental_end_date,
            total_amount=Decimal(total_amount),
            default_chargeable_days=default_chargeable_days,
            chargeable_days=default_chargeable_days,
            status=status,
            items=[OrderItem(product_id=product.id, quantity=quantity, unit_price=product.rental_price)],
        )
        db_session.add(order)
        db_session.commit()
        return order
    return factory
