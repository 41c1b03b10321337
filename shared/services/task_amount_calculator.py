"""Suggested worker-task amounts from order line items."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from core.utils.money import round_whole, to_decimal
from domain.entities.worker_task import TaskType


class ItemCategory(str, enum.Enum):
    CHAIRS = "chairs"
    TABLES = "tables"
    TENTS = "tents"
    DEFAULT = "default"


class VehicleType(str, enum.Enum):
    LORRY = "lorry"
    VAN = "van"
    PICKUP = "pickup"


class TransportType(str, enum.Enum):
    LOCAL = "local"
    OUT_OF_TOWN = "out_of_town"


_RATES_BY_CATEGORY: Dict[ItemCategory, Dict[TaskType, str]] = {
    ItemCategory.CHAIRS: {
        TaskType.ARRANGING_PICKUP: "0.8",
        TaskType.ISSUING: "1",
        TaskType.LOADING: "0.3",
        TaskType.TRANSPORT: "0.2",
        TaskType.UNLOADING: "0.3",
        TaskType.RECEIVING: "0.5",
        TaskType.LOADING_RETURNS: "0.3",
        TaskType.TRANSPORT_RETURNS: "0.2",
        TaskType.UNLOADING_RETURNS: "0.3",
        TaskType.STORING: "0.8",
    },
    ItemCategory.TABLES: {
        TaskType.ARRANGING_PICKUP: "4",
        TaskType.ISSUING: "5",
        TaskType.LOADING: "2",
        TaskType.TRANSPORT: "1.5",
        TaskType.UNLOADING: "2",
        TaskType.RECEIVING: "3",
        TaskType.LOADING_RETURNS: "2",
        TaskType.TRANSPORT_RETURNS: "1.5",
        TaskType.UNLOADING_RETURNS: "2",
        TaskType.STORING: "4",
    },
    ItemCategory.TENTS: {
        TaskType.ARRANGING_PICKUP: "8",
        TaskType.ISSUING: "10",
        TaskType.LOADING: "5",
        TaskType.TRANSPORT: "3",
        TaskType.UNLOADING: "5",
        TaskType.RECEIVING: "8",
        TaskType.LOADING_RETURNS: "5",
        TaskType.TRANSPORT_RETURNS: "3",
        TaskType.UNLOADING_RETURNS: "5",
        TaskType.STORING: "8",
    },
    ItemCategory.DEFAULT: {
        TaskType.ARRANGING_PICKUP: "1.5",
        TaskType.ISSUING: "2",
        TaskType.LOADING: "1",
        TaskType.TRANSPORT: "0.5",
        TaskType.UNLOADING: "1",
        TaskType.RECEIVING: "1.5",
        TaskType.LOADING_RETURNS: "1",
        TaskType.TRANSPORT_RETURNS: "0.5",
        TaskType.UNLOADING_RETURNS: "1",
        TaskType.STORING: "1.5",
    },
}

# Per-unit rate keyed by (category, task type)
TASK_RATES: Dict[Tuple[ItemCategory, TaskType], Decimal] = {
    (category, task_type): Decimal(rate)
    for category, rates in _RATES_BY_CATEGORY.items()
    for task_type, rate in rates.items()
}

# Flat fees that replace the per-item calculation
FIXED_TASK_RATES: Dict[Tuple[TaskType, str], Decimal] = {
    (TaskType.LOADING, VehicleType.LORRY.value): Decimal("200"),
    (TaskType.LOADING, VehicleType.VAN.value): Decimal("150"),
    (TaskType.LOADING, VehicleType.PICKUP.value): Decimal("100"),
    (TaskType.UNLOADING, VehicleType.LORRY.value): Decimal("200"),
    (TaskType.UNLOADING, VehicleType.VAN.value): Decimal("150"),
    (TaskType.UNLOADING, VehicleType.PICKUP.value): Decimal("100"),
    (TaskType.TRANSPORT, TransportType.LOCAL.value): Decimal("500"),
    (TaskType.TRANSPORT, TransportType.OUT_OF_TOWN.value): Decimal("1000"),
}

_VEHICLE_TASKS = (TaskType.LOADING, TaskType.UNLOADING)

CategoryClassifier = Callable[[str], ItemCategory]


class KeywordClassifier:
    """Maps a free-text product name to a category by keyword containment.

    Keywords are checked in order, case-insensitively; the first hit wins.
    """

    def __init__(self, keywords: Sequence[Tuple[str, ItemCategory]]):
        self.keywords = [(keyword.lower(), category) for keyword, category in keywords]

    def __call__(self, name: str) -> ItemCategory:
        if not name:
            return ItemCategory.DEFAULT
        lowered = name.lower()
        for keyword, category in self.keywords:
            if keyword in lowered:
                return category
        return ItemCategory.DEFAULT


classify_product_name = KeywordClassifier([
    ("chair", ItemCategory.CHAIRS),
    ("table", ItemCategory.TABLES),
    ("tent", ItemCategory.TENTS),
])


@dataclass(frozen=True)
class TaskLineItem:
    name: str
    quantity: int
    category: Optional[ItemCategory] = None


@dataclass(frozen=True)
class BreakdownLine:
    name: str
    category: ItemCategory
    quantity: int
    rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class FixedRate:
    option: str
    amount: Decimal


@dataclass
class TaskAmountBreakdown:
    task_type: TaskType
    total: Decimal
    lines: List[BreakdownLine] = field(default_factory=list)
    fixed_rate: Optional[FixedRate] = None


class TaskAmountCalculator:
    """
    Suggests how much a task is worth.

    The suggestion is advisory: a manually entered amount always wins and a
    zero suggestion never blocks task submission.
    """

    def __init__(
        self,
        classifier: Optional[CategoryClassifier] = None,
        rates: Optional[Dict[Tuple[ItemCategory, TaskType], Decimal]] = None,
        fixed_rates: Optional[Dict[Tuple[TaskType, str], Decimal]] = None,
    ):
        self.classifier = classifier or classify_product_name
        self.rates = rates if rates is not None else TASK_RATES
        self.fixed_rates = fixed_rates if fixed_rates is not None else FIXED_TASK_RATES

    def fixed_rate_for(
        self,
        task_type: TaskType,
        vehicle_type: Optional[str] = None,
        transport_type: Optional[str] = None,
    ) -> Optional[FixedRate]:
        if task_type in _VEHICLE_TASKS and vehicle_type:
            option = vehicle_type
        elif task_type == TaskType.TRANSPORT and transport_type:
            option = transport_type
        else:
            return None

        amount = self.fixed_rates.get((task_type, option))
        if amount is None:
            return None
        return FixedRate(option=option, amount=amount)

    def categorize(self, item: TaskLineItem) -> ItemCategory:
        if item.category is not None:
            return item.category
        return self.classifier(item.name)

    def breakdown(
        self,
        items: Iterable[TaskLineItem],
        task_type: TaskType,
        vehicle_type: Optional[str] = None,
        transport_type: Optional[str] = None,
    ) -> TaskAmountBreakdown:
        task_type = TaskType(task_type)

        fixed = self.fixed_rate_for(task_type, vehicle_type, transport_type)
        if fixed is not None:
            return TaskAmountBreakdown(task_type=task_type, total=round_whole(fixed.amount), fixed_rate=fixed)

        lines: List[BreakdownLine] = []
        total = Decimal("0")
        for item in items:
            quantity = int(item.quantity or 0)
            category = self.categorize(item)
            rate = self.rates.get((category, task_type), Decimal("0"))
            amount = rate * quantity
            total += amount
            lines.append(BreakdownLine(
                name=item.name,
                category=category,
                quantity=quantity,
                rate=rate,
                amount=amount,
            ))

        return TaskAmountBreakdown(task_type=task_type, total=round_whole(total), lines=lines)

    def calculate(
        self,
        items: Iterable[TaskLineItem],
        task_type: TaskType,
        vehicle_type: Optional[str] = None,
        transport_type: Optional[str] = None,
    ) -> Decimal:
        return self.breakdown(items, task_type, vehicle_type, transport_type).total


def line_items_from_order(order, classifier: Optional[CategoryClassifier] = None) -> List[TaskLineItem]:
    """Builds calculator input from an order's items.

    The product name is classified first; when it says nothing, the
    product's category text is tried.
    """
    classify = classifier or classify_product_name
    result = []
    for item in order.items:
        product = item.product
        name = product.name if product else ""
        category = classify(name)
        if category == ItemCategory.DEFAULT and product is not None and product.category:
            category = classify(product.category)
        result.append(TaskLineItem(name=name, quantity=int(item.quantity or 0), category=category))
    return result


def suggest_from_task_rate(rate_per_unit, quantity) -> Decimal:
    """Amount suggested by a configured TaskRate for a quantity."""
    return round_whole(to_decimal(rate_per_unit) * to_decimal(quantity))
