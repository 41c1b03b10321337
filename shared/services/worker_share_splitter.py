"""Splitting a task amount between the workers who were present."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.errors import ValidationError
from core.utils.money import CENT, to_decimal
from domain.entities.worker_task import TaskType


class PaymentPolicy(str, enum.Enum):
    """How a task amount turns into worker pay.

    SHARED_POOL: the amount is divided equally between present workers.
    FULL_RATE_PER_WORKER: every present worker receives the whole amount
    (day-rate style engagements).
    """
    SHARED_POOL = "shared_pool"
    FULL_RATE_PER_WORKER = "full_rate_per_worker"


TASK_PAYMENT_POLICIES: Dict[TaskType, PaymentPolicy] = {
    task_type: PaymentPolicy.SHARED_POOL for task_type in TaskType
}
TASK_PAYMENT_POLICIES[TaskType.OTHER] = PaymentPolicy.FULL_RATE_PER_WORKER


def policy_for(task_type: TaskType) -> PaymentPolicy:
    return TASK_PAYMENT_POLICIES.get(TaskType(task_type), PaymentPolicy.SHARED_POOL)


@dataclass(frozen=True)
class WorkerPresence:
    worker_id: int
    present: bool = True


@dataclass(frozen=True)
class WorkerShare:
    worker_id: int
    present: bool
    amount: Decimal


def _presence(entry: Any) -> WorkerPresence:
    """Accepts WorkerPresence, ORM assignments or plain dicts."""
    if isinstance(entry, WorkerPresence):
        return entry
    if isinstance(entry, dict):
        return WorkerPresence(worker_id=entry["worker_id"], present=bool(entry.get("present", True)))
    return WorkerPresence(worker_id=entry.worker_id, present=bool(entry.present))


def validate_assignments(workers: Iterable[Any]) -> List[WorkerPresence]:
    """Checks that a task can be paid: at least one present worker, no duplicates."""
    entries = [_presence(w) for w in workers]
    if not entries:
        raise ValidationError("At least one worker is required")

    seen = set()
    for entry in entries:
        if entry.worker_id in seen:
            raise ValidationError(
                f"Worker {entry.worker_id} is listed more than once",
                {"worker_id": entry.worker_id},
            )
        seen.add(entry.worker_id)

    if not any(entry.present for entry in entries):
        raise ValidationError("At least one worker must be marked present")
    return entries


def present_count(workers: Iterable[Any]) -> int:
    return sum(1 for w in workers if _presence(w).present)


def share_per_worker(task_amount: Any, workers: Sequence[Any]) -> Decimal:
    """Equal share of the pool, unrounded; 0 when nobody was present."""
    count = present_count(workers)
    if count == 0:
        return Decimal("0")
    return to_decimal(task_amount) / count


def split(
    task_amount: Any,
    workers: Sequence[Any],
    policy: PaymentPolicy = PaymentPolicy.SHARED_POOL,
) -> List[WorkerShare]:
    """
    Per-worker amounts for one task, in input order.

    Shared-pool shares are rounded down to the cent and the leftover cents go
    to the first present worker, so the shares add up to ``task_amount``.
    Absent workers always get 0.
    """
    amount = to_decimal(task_amount)
    entries = [_presence(w) for w in workers]
    present = [e for e in entries if e.present]

    if not present:
        return [WorkerShare(e.worker_id, e.present, Decimal("0.00")) for e in entries]

    if policy == PaymentPolicy.FULL_RATE_PER_WORKER:
        each = amount.quantize(CENT)
        remainder = Decimal("0")
    else:
        each = (amount / len(present)).quantize(CENT, rounding=ROUND_DOWN)
        remainder = amount.quantize(CENT) - each * len(present)

    shares = []
    first_present_seen = False
    for entry in entries:
        if not entry.present:
            shares.append(WorkerShare(entry.worker_id, False, Decimal("0.00")))
            continue
        value = each
        if not first_present_seen:
            value += remainder
            first_present_seen = True
        shares.append(WorkerShare(entry.worker_id, True, value))
    return shares


def share_for(
    task_amount: Any,
    workers: Sequence[Any],
    worker_id: int,
    policy: PaymentPolicy = PaymentPolicy.SHARED_POOL,
) -> Optional[Decimal]:
    """Share of one worker, or None when the worker is not on the task."""
    for share in split(task_amount, workers, policy):
        if share.worker_id == worker_id:
            return share.amount
    return None
