"""Tests for order status transitions and their side effects."""

from datetime import date
from decimal import Decimal

import pytest

from core.database.connection import DatabaseManager
from core.errors import ConflictError, NotFoundError, StateError, ValidationError
from domain.entities import Client, Order, OrderItem, OrderStatus, Product, Worker, WorkerTask
from domain.entities.violation import ViolationType
from domain.entities.worker_task import TaskType
from shared.services.inventory_service import InventoryService
from shared.services.order_lifecycle_service import (
    OrderLifecycleCoordinator,
    StatusChangeRequest,
    available_transitions,
    ensure_transition,
)


@pytest.fixture
def coordinator(db_session):
    return OrderLifecycleCoordinator(db_session)


@pytest.fixture
def crew(make_worker):
    return [make_worker(name="Amina"), make_worker(name="Brian"), make_worker(name="Chege")]


class TestTransitionTable:

    @pytest.mark.parametrize("current,target", [
        (OrderStatus.PENDING, OrderStatus.CONFIRMED),
        (OrderStatus.PENDING, OrderStatus.CANCELLED),
        (OrderStatus.CONFIRMED, OrderStatus.IN_PROGRESS),
        (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
        (OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED),
        (OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED),
    ])
    def test_allowed(self, current, target):
        ensure_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        (OrderStatus.PENDING, OrderStatus.COMPLETED),
        (OrderStatus.PENDING, OrderStatus.IN_PROGRESS),
        (OrderStatus.CONFIRMED, OrderStatus.PENDING),
        (OrderStatus.COMPLETED, OrderStatus.CANCELLED),
        (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
        (OrderStatus.COMPLETED, OrderStatus.COMPLETED),
    ])
    def test_rejected(self, current, target):
        with pytest.raises(StateError):
            ensure_transition(current, target)

    def test_terminal_states_have_no_exits(self):
        assert available_transitions(OrderStatus.COMPLETED) == frozenset()
        assert available_transitions(OrderStatus.CANCELLED) == frozenset()


class TestChangeStatus:

    def test_confirm_has_no_pricing_or_task(self, coordinator, make_order):
        order = make_order()

        result = coordinator.change_status(order.id, StatusChangeRequest(status=OrderStatus.CONFIRMED))

        assert result.order.status == OrderStatus.CONFIRMED
        assert result.adjustment is None
        assert result.task is None
        assert result.task_error is None
        assert result.difference == Decimal("0.00")

    def test_start_records_issuing_task(self, coordinator, make_order, crew):
        order = make_order(status=OrderStatus.CONFIRMED)
        workers = [{"worker_id": w.id, "present": True} for w in crew]

        result = coordinator.change_status(order.id, StatusChangeRequest(status=OrderStatus.IN_PROGRESS, workers=workers))

        assert result.order.status == OrderStatus.IN_PROGRESS
        assert result.task is not None
        assert result.task.task_type == TaskType.ISSUING
        # 100 plastic chairs at 1 per chair
        assert result.task.task_amount == Decimal("100.00")
        assert len(result.task.present_workers) == 3

    def test_caller_amount_overrides_suggestion(self, coordinator, make_order, crew):
        order = make_order(status=OrderStatus.CONFIRMED)

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.IN_PROGRESS,
            workers=[{"worker_id": crew[0].id}],
            task_amount=Decimal("250"),
        ))

        assert result.task.task_amount == Decimal("250.00")

    def test_complete_early_return(self, coordinator, make_order, crew, db_session):
        order = make_order(status=OrderStatus.IN_PROGRESS)

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.COMPLETED,
            actual_return_date="2024-03-04",
            workers=[{"worker_id": crew[0].id}, {"worker_id": crew[1].id, "present": False}],
        ))

        assert result.adjusted_amount == Decimal("6000.00")
        assert result.difference == Decimal("-4000.00")
        assert "Refund of 4000.00" in result.message

        stored = db_session.get(Order, order.id)
        assert stored.status == OrderStatus.COMPLETED
        assert stored.actual_return_date == date(2024, 3, 4)
        assert stored.chargeable_days == 3
        assert stored.adjusted_amount == Decimal("6000.00")
        assert stored.adjustment_difference == Decimal("-4000.00")
        assert stored.total_amount == Decimal("10000.00")

        assert result.task.task_type == TaskType.RECEIVING
        # 100 chairs at 0.5
        assert result.task.task_amount == Decimal("50.00")

    def test_complete_late_return(self, coordinator, make_order, crew):
        order = make_order(status=OrderStatus.IN_PROGRESS)

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.COMPLETED,
            actual_return_date="2024-03-09",
            workers=[{"worker_id": crew[0].id}],
        ))

        assert result.adjusted_amount == Decimal("19000.00")
        assert result.difference == Decimal("9000.00")
        # expected back 2024-03-05, so four days overdue
        assert [v.penalty_amount for v in result.violations] == [Decimal("200.00")]
        assert result.order.violations[0].violation_type == ViolationType.OVERDUE_RETURN

    def test_complete_requires_return_date(self, coordinator, make_order, db_session):
        order = make_order(status=OrderStatus.IN_PROGRESS)

        with pytest.raises(ValidationError):
            coordinator.change_status(order.id, StatusChangeRequest(status=OrderStatus.COMPLETED))

        assert db_session.get(Order, order.id).status == OrderStatus.IN_PROGRESS

    def test_unparseable_return_date_completes_without_adjustment(self, coordinator, make_order, crew):
        order = make_order(status=OrderStatus.IN_PROGRESS)

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.COMPLETED,
            actual_return_date="sometime last week",
            workers=[{"worker_id": crew[0].id}],
        ))

        assert result.order.status == OrderStatus.COMPLETED
        assert result.adjustment.fallback is True
        assert result.adjusted_amount == Decimal("10000.00")
        assert result.difference == Decimal("0.00")
        assert result.order.actual_return_date is None
        assert "'sometime last week' could not be read" in result.order.notes
        assert result.message.endswith("Return date missing")
        assert result.violations == []

    def test_cancel_applies_fee(self, coordinator, make_order):
        order = make_order(total_amount="8000.00", status=OrderStatus.CONFIRMED)

        result = coordinator.change_status(order.id, StatusChangeRequest(status=OrderStatus.CANCELLED))

        assert result.adjusted_amount == Decimal("800.00")
        assert result.order.chargeable_days == 0
        assert result.task is None

    def test_illegal_transition_changes_nothing(self, coordinator, make_order, db_session):
        order = make_order()

        with pytest.raises(StateError):
            coordinator.change_status(order.id, StatusChangeRequest(
                status=OrderStatus.COMPLETED, actual_return_date="2024-03-04"
            ))

        stored = db_session.get(Order, order.id)
        assert stored.status == OrderStatus.PENDING
        assert stored.adjusted_amount is None

    def test_unknown_order(self, coordinator):
        with pytest.raises(NotFoundError):
            coordinator.change_status(999, StatusChangeRequest(status=OrderStatus.CONFIRMED))


class TestTaskFailureIsNotFatal:

    def test_no_present_worker_keeps_status(self, coordinator, make_order, make_worker, db_session):
        order = make_order(status=OrderStatus.CONFIRMED)
        absent = make_worker()

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.IN_PROGRESS,
            workers=[{"worker_id": absent.id, "present": False}],
        ))

        assert result.task is None
        assert result.task_error == "At least one worker must be marked present"
        assert db_session.get(Order, order.id).status == OrderStatus.IN_PROGRESS
        assert db_session.query(WorkerTask).count() == 0

    def test_unknown_worker_keeps_completion(self, coordinator, make_order, db_session):
        order = make_order(status=OrderStatus.IN_PROGRESS)

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.COMPLETED,
            actual_return_date="2024-03-06",
            workers=[{"worker_id": 4242}],
        ))

        assert result.task_error == "Worker 4242 not found"
        stored = db_session.get(Order, order.id)
        assert stored.status == OrderStatus.COMPLETED
        assert stored.adjusted_amount == Decimal("10000.00")

    def test_zero_suggestion_is_reported(self, coordinator, make_order, make_product, crew):
        product = make_product(name="Sound system", rental_price="50.00")
        order = make_order(status=OrderStatus.CONFIRMED, product=product, quantity=0)

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.IN_PROGRESS,
            workers=[{"worker_id": crew[0].id}],
        ))

        assert result.order.status == OrderStatus.IN_PROGRESS
        assert result.task_error == "Task amount must be greater than 0"


class TestInventory:

    def test_completion_releases_rented_quantity(self, coordinator, make_order, make_product, crew, db_session):
        product = make_product(quantity_in_stock=500)
        order = make_order(status=OrderStatus.IN_PROGRESS, product=product, quantity=120)
        inventory = InventoryService(db_session)
        assert inventory.rented_quantity(product.id) == 120

        result = coordinator.change_status(order.id, StatusChangeRequest(
            status=OrderStatus.COMPLETED,
            actual_return_date="2024-03-05",
            workers=[{"worker_id": crew[0].id}],
        ))

        assert inventory.rented_quantity(product.id) == 0
        assert [a.quantity_available for a in result.inventory] == [500]

    def test_pending_orders_do_not_hold_stock(self, make_order, make_product, db_session):
        product = make_product(quantity_in_stock=50)
        make_order(status=OrderStatus.PENDING, product=product, quantity=30)
        make_order(status=OrderStatus.CONFIRMED, product=product, quantity=10)

        availability = InventoryService(db_session).availability([product.id])[0]
        assert availability.quantity_rented == 10
        assert availability.quantity_available == 40


def test_preview_does_not_persist(coordinator, make_order, db_session):
    order = make_order(status=OrderStatus.IN_PROGRESS)

    adjustment = coordinator.preview(order.id, StatusChangeRequest(
        status=OrderStatus.COMPLETED, actual_return_date="2024-03-09"
    ))

    assert adjustment.adjusted_amount == Decimal("19000.00")
    stored = db_session.get(Order, order.id)
    assert stored.status == OrderStatus.IN_PROGRESS
    assert stored.adjusted_amount is None


def test_concurrent_transition_is_rejected(tmp_path):
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'concurrency.db'}")
    manager.create_schema()
    setup = manager.get_session()
    client = Client(name="Client", phone="1")
    product = Product(name="Chair", rental_price=Decimal("10"), quantity_in_stock=10)
    setup.add_all([client, product])
    setup.commit()
    order = Order(
        client_id=client.id,
        rental_start_date=date(2024, 3, 1),
        rental_end_date=date(2024, 3, 2),
        expected_return_date=date(2024, 3, 5),
        total_amount=Decimal("200"),
        default_chargeable_days=2,
        status=OrderStatus.CONFIRMED,
        items=[OrderItem(product_id=product.id, quantity=1, unit_price=Decimal("10"))],
    )
    setup.add(order)
    setup.commit()
    order_id = order.id
    setup.close()

    first = manager.get_session()
    second = manager.get_session()
    try:
        first.get(Order, order_id)
        second.get(Order, order_id)

        OrderLifecycleCoordinator(first).change_status(order_id, StatusChangeRequest(status=OrderStatus.CANCELLED))

        with pytest.raises(ConflictError):
            OrderLifecycleCoordinator(second).change_status(order_id, StatusChangeRequest(status=OrderStatus.CANCELLED))
    finally:
        first.close()
        second.close()
        manager.close()
