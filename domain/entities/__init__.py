"""
RentFlow domain entities
"""

# Import order matters for relationship resolution
from .base import Base
from .client import Client
from .product import Product
from .order import Order, OrderItem, OrderStatus, PaymentStatus, ACTIVE_ORDER_STATUSES
from .worker import Worker, WorkerAttendance
from .worker_task import WorkerTask, WorkerTaskAssignment, TaskType
from .task_rate import TaskRate
from .violation import Violation, ViolationType

__all__ = [
    "Base",
    "Client",
    "Product",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "ACTIVE_ORDER_STATUSES",
    "Worker",
    "WorkerAttendance",
    "WorkerTask",
    "WorkerTaskAssignment",
    "TaskType",
    "TaskRate",
    "Violation",
    "ViolationType",
]
