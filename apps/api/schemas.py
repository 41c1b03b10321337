"""
Pydantic schemas for the RentFlow API
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.config.settings import settings
from core.utils.money import quantize_money
from domain.entities.order import OrderStatus, PaymentStatus
from domain.entities.violation import ViolationType
from domain.entities.worker_task import TaskType
from shared.services.date_calculator import ReturnStatus
from shared.services.pricing_adjuster import AdjustmentKind
from shared.services.task_amount_calculator import ItemCategory, TransportType, VehicleType
from shared.services.worker_share_splitter import PaymentPolicy, policy_for


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    """Error envelope."""
    error: str
    message: str
    details: Optional[dict] = None


# Clients

class ClientCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    contact_person: Optional[str] = Field(None, max_length=200)
    email: Optional[str] = Field(None, max_length=200)
    company: Optional[str] = Field(None, max_length=200)


class ClientResponse(ORMModel):
    id: int
    name: str
    phone: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    company: Optional[str] = None
    created_at: Optional[datetime] = None


# Products

class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    rental_price: Decimal = Field(..., ge=0, description="Price per unit per day")
    quantity_in_stock: int = Field(0, ge=0)
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    category: Optional[str] = Field(None, max_length=100)
    rental_price: Optional[Decimal] = Field(None, ge=0)
    quantity_in_stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class ProductResponse(ORMModel):
    id: int
    name: str
    category: Optional[str] = None
    rental_price: Decimal
    quantity_in_stock: int
    is_active: bool
    quantity_rented: int = 0
    quantity_available: int = 0


# Orders

class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int


class OrderItemResponse(ORMModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderCreate(BaseModel):
    client_id: int
    rental_start_date: date
    rental_end_date: date
    items: List[OrderItemCreate] = Field(default_factory=list)
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100)
    tax_rate: Optional[Decimal] = Field(None, ge=0)
    chargeable_days: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)


class OrderUpdate(BaseModel):
    """Generic order update. Status changes go through the status endpoint."""
    model_config = ConfigDict(extra="forbid")

    rental_start_date: Optional[date] = None
    rental_end_date: Optional[date] = None
    expected_return_date: Optional[date] = None
    notes: Optional[str] = None
    location: Optional[str] = Field(None, max_length=255)


class OrderResponse(ORMModel):
    id: int
    client_id: int
    status: OrderStatus
    rental_start_date: date
    rental_end_date: date
    expected_return_date: date
    actual_return_date: Optional[date] = None
    total_amount: Decimal
    amount_paid: Decimal
    remaining_amount: Decimal
    payment_status: PaymentStatus
    discount_percentage: Decimal = Decimal("0.00")
    tax_rate: Decimal = Decimal("0.00")
    discount_amount: Decimal
    discount_applied: bool
    discount_approved_by: Optional[str] = None
    default_chargeable_days: int
    chargeable_days: int
    adjusted_amount: Optional[Decimal] = None
    adjustment_difference: Optional[Decimal] = None
    notes: Optional[str] = None
    location: Optional[str] = None
    version: int
    items: List[OrderItemResponse] = Field(default_factory=list)
    created_at: Optional[datetime] = None


class WorkerAssignmentIn(BaseModel):
    worker_id: int
    present: bool = True


class StatusChangeRequestSchema(BaseModel):
    status: OrderStatus
    actual_return_date: Optional[str] = Field(None, description="ISO date or datetime")
    chargeable_days: Optional[int] = Field(None, ge=0)
    workers: List[WorkerAssignmentIn] = Field(default_factory=list)
    task_amount: Optional[Decimal] = None
    vehicle_type: Optional[VehicleType] = None
    transport_type: Optional[TransportType] = None
    task_notes: Optional[str] = None
    changed_by: Optional[str] = None


class PricingPreviewRequest(BaseModel):
    status: OrderStatus = OrderStatus.COMPLETED
    actual_return_date: Optional[str] = None
    chargeable_days: Optional[int] = Field(None, ge=0)


class PricingAdjustmentResponse(BaseModel):
    original_amount: Decimal
    adjusted_amount: Decimal
    difference: Decimal
    chargeable_days: int
    default_chargeable_days: int
    daily_rate: Decimal
    kind: AdjustmentKind
    extra_days: int = 0
    fallback: bool = False
    error: Optional[str] = None
    message: str


class WorkerAssignmentResponse(ORMModel):
    worker_id: int
    worker_name: str
    present: bool


class WorkerTaskResponse(ORMModel):
    id: int
    order_id: int
    task_type: TaskType
    task_amount: Decimal
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_by: Optional[str] = None
    workers: List[WorkerAssignmentResponse] = Field(default_factory=list)
    present_worker_count: int = 0
    payment_policy: PaymentPolicy = PaymentPolicy.SHARED_POOL

    @classmethod
    def from_task(cls, task) -> "WorkerTaskResponse":
        response = cls.model_validate(task)
        response.present_worker_count = len(task.present_workers)
        response.payment_policy = policy_for(task.task_type)
        return response


class StatusChangeResponse(BaseModel):
    order: OrderResponse
    adjusted_amount: Decimal
    difference: Decimal
    message: str
    adjustment: Optional[PricingAdjustmentResponse] = None
    task: Optional[WorkerTaskResponse] = None
    task_error: Optional[str] = None
    violations: List["ViolationResponse"] = Field(default_factory=list)


class ReturnStatusResponse(BaseModel):
    order_id: int
    status: ReturnStatus
    is_early: bool
    is_late: bool
    is_within_grace: bool
    extra_days: int
    actual_date: Optional[date] = None
    planned_date: Optional[date] = None
    grace_end_date: Optional[date] = None


class PaymentUpdate(BaseModel):
    amount_paid: Decimal = Field(..., ge=0)


class DiscountRequest(BaseModel):
    discount_amount: Decimal = Field(..., gt=0)
    reason: Optional[str] = None


class DiscountApproval(BaseModel):
    approved: bool = True
    approved_by: Optional[str] = Field(None, max_length=100, description="Defaults to the caller role")


# Workers

class WorkerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., min_length=1, max_length=50)
    daily_rate: Decimal = Field(Decimal("0"), ge=0, description="0 means paid by tasks only")


class WorkerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    phone: Optional[str] = Field(None, min_length=1, max_length=50)
    daily_rate: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class WorkerResponse(ORMModel):
    id: int
    name: str
    phone: str
    daily_rate: Decimal
    hourly_rate: Decimal
    is_active: bool

    @classmethod
    def from_worker(cls, worker) -> "WorkerResponse":
        return cls(
            id=worker.id,
            name=worker.name,
            phone=worker.phone,
            daily_rate=worker.daily_rate,
            hourly_rate=quantize_money(worker.hourly_rate(settings.working_hours_per_day)),
            is_active=worker.is_active,
        )


class AttendanceCreate(BaseModel):
    date: date
    hours_worked: Optional[Decimal] = Field(None, ge=0, le=24)
    order_id: Optional[int] = None
    notes: Optional[str] = None


class AttendanceResponse(ORMModel):
    id: int
    worker_id: int
    date: date
    hours_worked: Optional[Decimal] = None
    order_id: Optional[int] = None
    notes: Optional[str] = None


class AttendanceLineResponse(ORMModel):
    date: date
    hours_worked: Optional[Decimal] = None
    amount: Decimal
    order_id: Optional[int] = None


class RemunerationResponse(ORMModel):
    worker_id: int
    worker_name: str
    daily_rate: Decimal
    hourly_rate: Decimal
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_days: int
    total_hours: Decimal
    total_remuneration: Decimal
    lines: List[AttendanceLineResponse] = Field(default_factory=list)


# Worker tasks

class WorkerTaskCreate(BaseModel):
    order_id: int
    task_type: TaskType
    workers: List[WorkerAssignmentIn] = Field(default_factory=list)
    task_amount: Decimal = Field(..., description="Amount for the whole task, not per worker")
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_by: Optional[str] = None


class WorkerTaskUpdate(BaseModel):
    task_type: Optional[TaskType] = None
    workers: Optional[List[WorkerAssignmentIn]] = None
    task_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None


class TaskTypeEarnings(ORMModel):
    count: int
    earnings: Decimal


class TaskEarningLine(ORMModel):
    task_id: int
    order_id: int
    task_type: TaskType
    task_amount: Decimal
    present_workers: int
    policy: PaymentPolicy
    earnings: Decimal
    completed_at: Optional[datetime] = None


class EarningsResponse(ORMModel):
    worker_id: int
    worker_name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_tasks: int
    total_earnings: Decimal
    by_task_type: Dict[str, TaskTypeEarnings] = Field(default_factory=dict)
    lines: List[TaskEarningLine] = Field(default_factory=list)


class SuggestItem(BaseModel):
    name: str
    quantity: int = Field(..., ge=0)
    category: Optional[ItemCategory] = None


class SuggestAmountRequest(BaseModel):
    task_type: TaskType
    order_id: Optional[int] = None
    items: List[SuggestItem] = Field(default_factory=list)
    vehicle_type: Optional[VehicleType] = None
    transport_type: Optional[TransportType] = None


class SuggestLine(ORMModel):
    name: str
    category: ItemCategory
    quantity: int
    rate: Decimal
    amount: Decimal


class FixedRateResponse(ORMModel):
    option: str
    amount: Decimal


class SuggestAmountResponse(ORMModel):
    task_type: TaskType
    total: Decimal
    lines: List[SuggestLine] = Field(default_factory=list)
    fixed_rate: Optional[FixedRateResponse] = None


# Task rates

class TaskRateCreate(BaseModel):
    task_type: TaskType
    task_name: str = Field(..., min_length=1, max_length=200)
    rate_per_unit: Decimal = Field(..., ge=0)
    unit: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = None
    is_active: bool = True


class TaskRateUpdate(BaseModel):
    task_name: Optional[str] = Field(None, min_length=1, max_length=200)
    rate_per_unit: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class TaskRateResponse(ORMModel):
    id: int
    task_type: TaskType
    task_name: str
    rate_per_unit: Decimal
    unit: str
    description: Optional[str] = None
    is_active: bool


class TaskRateSuggestion(BaseModel):
    task_rate_id: int
    task_type: TaskType
    quantity: int
    rate_per_unit: Decimal
    unit: str
    suggested_amount: Decimal

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v < 0:
            raise ValueError("Quantity must not be negative")
        return v


# Violations

class ViolationCreate(BaseModel):
    order_id: int
    violation_type: ViolationType
    description: str = Field(..., min_length=1)
    penalty_amount: Decimal = Field(Decimal("0"), ge=0)
    created_by: Optional[str] = Field(None, max_length=100)


class ViolationUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    violation_type: Optional[ViolationType] = None
    description: Optional[str] = Field(None, min_length=1)
    penalty_amount: Optional[Decimal] = Field(None, ge=0)


class ViolationResolve(BaseModel):
    paid_amount: Decimal = Field(Decimal("0"), ge=0)
    waived_amount: Decimal = Field(Decimal("0"), ge=0)
    resolution_notes: Optional[str] = None
    resolved_by: Optional[str] = Field(None, max_length=100, description="Defaults to the caller role")


class ViolationResponse(ORMModel):
    id: int
    order_id: int
    violation_type: ViolationType
    description: str
    penalty_amount: Decimal
    resolved: bool
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    paid_amount: Decimal
    waived_amount: Decimal
    outstanding_amount: Decimal
    resolution_notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


StatusChangeResponse.model_rebuild()


# Reports

class OverdueReturnResponse(ORMModel):
    order_id: int
    client_id: int
    client_name: str
    rental_end_date: date
    expected_return_date: date
    overdue_days: int
    return_status: ReturnStatus
    total_amount: Decimal
    amount_paid: Decimal
    estimated_penalty: Decimal


class WorkerRemunerationLineResponse(ORMModel):
    worker_id: int
    worker_name: str
    daily_rate: Decimal
    total_days: int
    total_hours: Decimal
    attendance_amount: Decimal
    task_count: int
    task_earnings: Decimal
    total: Decimal


class RemunerationSummaryResponse(ORMModel):
    start_date: date
    end_date: date
    total_attendance: Decimal
    total_task_earnings: Decimal
    total_remuneration: Decimal
    workers: List[WorkerRemunerationLineResponse] = Field(default_factory=list)
