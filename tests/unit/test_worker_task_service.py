"""Tests for recording and querying worker tasks."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from core.errors import NotFoundError, ValidationError
from domain.entities.worker_task import TaskType
from shared.services.worker_task_service import WorkerTaskService, period_bounds


@pytest.fixture
def service(db_session):
    return WorkerTaskService(db_session)


class TestCreateTask:

    def test_records_assignments(self, service, make_order, make_worker):
        order = make_order()
        first, second = make_worker(name="One"), make_worker(name="Two")

        task = service.create_task(
            order.id, TaskType.LOADING,
            [{"worker_id": first.id, "present": True}, {"worker_id": second.id, "present": False}],
            "1500", notes="Lorry 1", created_by="dispatcher",
        )

        assert task.id is not None
        assert task.task_amount == Decimal("1500.00")
        assert [w.worker_id for w in task.present_workers] == [first.id]
        assert task.workers[1].worker_name == "Two"

    @pytest.mark.parametrize("amount", [0, "-5", None, "abc"])
    def test_rejects_non_positive_amount(self, service, make_order, make_worker, amount):
        order = make_order()
        worker = make_worker()
        with pytest.raises(ValidationError):
            service.create_task(order.id, TaskType.LOADING, [{"worker_id": worker.id}], amount)

    def test_rejects_all_absent(self, service, make_order, make_worker):
        order = make_order()
        worker = make_worker()
        with pytest.raises(ValidationError):
            service.create_task(order.id, TaskType.LOADING, [{"worker_id": worker.id, "present": False}], 100)

    def test_unknown_order(self, service, make_worker):
        worker = make_worker()
        with pytest.raises(NotFoundError):
            service.create_task(77, TaskType.LOADING, [{"worker_id": worker.id}], 100)


class TestQueries:

    def test_filters(self, service, make_order, make_worker):
        order = make_order()
        other_order = make_order()
        worker, helper = make_worker(name="W"), make_worker(name="H")
        service.create_task(order.id, TaskType.LOADING, [{"worker_id": worker.id}], 10,
                            completed_at=datetime(2024, 3, 1, 9))
        service.create_task(other_order.id, TaskType.STORING, [{"worker_id": helper.id}], 20,
                            completed_at=datetime(2024, 3, 5, 9))
        service.create_task(order.id, TaskType.STORING,
                            [{"worker_id": worker.id, "present": False}, {"worker_id": helper.id}], 30,
                            completed_at=datetime(2024, 3, 9, 9))

        assert len(service.list_tasks()) == 3
        assert len(service.list_tasks(order_id=order.id)) == 2
        assert len(service.list_tasks(task_type=TaskType.STORING)) == 2
        assert len(service.list_tasks(worker_id=worker.id)) == 2
        assert len(service.list_tasks(worker_id=worker.id, present_only=True)) == 1
        assert len(service.list_tasks(start_date=date(2024, 3, 5), end_date=date(2024, 3, 5))) == 1
        # newest first
        assert [t.task_amount for t in service.list_tasks()] == [Decimal("30.00"), Decimal("20.00"), Decimal("10.00")]

    def test_update_and_delete(self, service, make_order, make_worker):
        order = make_order()
        worker, helper = make_worker(name="W"), make_worker(name="H")
        task = service.create_task(order.id, TaskType.LOADING, [{"worker_id": worker.id}], 10)

        updated = service.update_task(task.id, {
            "task_amount": "45",
            "notes": "corrected",
            "workers": [{"worker_id": worker.id}, {"worker_id": helper.id}],
        })
        assert updated.task_amount == Decimal("45.00")
        assert updated.notes == "corrected"
        assert len(updated.present_workers) == 2

        with pytest.raises(ValidationError):
            service.update_task(task.id, {"task_amount": 0})

        service.delete_task(task.id)
        with pytest.raises(NotFoundError):
            service.get_task(task.id)


def test_period_bounds_are_inclusive():
    lower, upper = period_bounds(date(2024, 3, 1), date(2024, 3, 31))
    assert lower == datetime(2024, 3, 1)
    assert upper == datetime(2024, 4, 1)
    assert period_bounds(None, None) == (None, None)
