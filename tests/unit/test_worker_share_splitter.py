"""Unit tests for splitting task amounts between workers."""

from decimal import Decimal

import pytest

from core.errors import ValidationError
from domain.entities.worker_task import TaskType
from shared.services.worker_share_splitter import (
    PaymentPolicy,
    WorkerPresence,
    policy_for,
    share_for,
    share_per_worker,
    split,
    validate_assignments,
)


@pytest.fixture
def five_workers_three_present():
    return [
        WorkerPresence(1, True),
        WorkerPresence(2, False),
        WorkerPresence(3, True),
        WorkerPresence(4, False),
        WorkerPresence(5, True),
    ]


class TestSharedPool:

    def test_equal_split_between_present(self, five_workers_three_present):
        shares = {s.worker_id: s.amount for s in split(Decimal("1500"), five_workers_three_present)}

        assert shares == {
            1: Decimal("500.00"),
            2: Decimal("0.00"),
            3: Decimal("500.00"),
            4: Decimal("0.00"),
            5: Decimal("500.00"),
        }

    def test_remainder_goes_to_first_present(self):
        workers = [WorkerPresence(7, False), WorkerPresence(8, True), WorkerPresence(9, True), WorkerPresence(10, True)]
        shares = split(Decimal("100"), workers)

        assert [s.amount for s in shares] == [Decimal("0.00"), Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]
        assert sum(s.amount for s in shares) == Decimal("100.00")

    @pytest.mark.parametrize("amount", ["0.01", "1", "99.99", "1000", "2417.35"])
    @pytest.mark.parametrize("present", [1, 2, 3, 7])
    def test_shares_sum_to_task_amount(self, amount, present):
        workers = [WorkerPresence(i, True) for i in range(present)] + [WorkerPresence(100, False)]
        total = sum(s.amount for s in split(Decimal(amount), workers))
        assert total == Decimal(amount).quantize(Decimal("0.01"))

    def test_nobody_present_gets_zero(self):
        shares = split(Decimal("300"), [WorkerPresence(1, False)])
        assert shares[0].amount == Decimal("0.00")

    def test_dict_and_object_inputs(self):
        workers = [{"worker_id": 1, "present": True}, {"worker_id": 2}]
        assert share_per_worker(Decimal("90"), workers) == Decimal("45")


class TestFullRatePerWorker:

    def test_each_present_worker_gets_full_amount(self, five_workers_three_present):
        shares = split(Decimal("800"), five_workers_three_present, PaymentPolicy.FULL_RATE_PER_WORKER)
        present = [s.amount for s in shares if s.present]
        absent = [s.amount for s in shares if not s.present]

        assert present == [Decimal("800.00")] * 3
        assert absent == [Decimal("0.00")] * 2

    def test_policy_per_task_type(self):
        assert policy_for(TaskType.LOADING) == PaymentPolicy.SHARED_POOL
        assert policy_for(TaskType.RECEIVING) == PaymentPolicy.SHARED_POOL
        assert policy_for(TaskType.OTHER) == PaymentPolicy.FULL_RATE_PER_WORKER


class TestValidation:

    def test_requires_a_present_worker(self):
        with pytest.raises(ValidationError):
            validate_assignments([WorkerPresence(1, False), WorkerPresence(2, False)])

    def test_requires_workers(self):
        with pytest.raises(ValidationError):
            validate_assignments([])

    def test_rejects_duplicates(self):
        with pytest.raises(ValidationError) as exc:
            validate_assignments([WorkerPresence(1, True), WorkerPresence(1, False)])
        assert exc.value.details == {"worker_id": 1}


def test_share_for_unknown_worker_is_none(five_workers_three_present):
    assert share_for(Decimal("1500"), five_workers_three_present, 3) == Decimal("500.00")
    assert share_for(Decimal("1500"), five_workers_three_present, 2) == Decimal("0.00")
    assert share_for(Decimal("1500"), five_workers_three_present, 42) is None
