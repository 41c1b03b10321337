"""initial_schema

Clients, catalogue, orders, workers, worker tasks, task rates and violations.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2024-03-01 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    ]


def upgrade() -> None:
    """Create the RentFlow tables."""

    # === 1. CLIENTS AND CATALOGUE ===

    op.create_table(
        'clients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('contact_person', sa.String(200), nullable=True),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('email', sa.String(200), nullable=True),
        sa.Column('company', sa.String(200), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_clients_id', 'clients', ['id'])
    op.create_index('ix_clients_name', 'clients', ['name'])

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('rental_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('quantity_in_stock', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_id', 'products', ['id'])
    op.create_index('ix_products_is_active', 'products', ['is_active'])

    # === 2. ORDERS ===

    op.create_table(
        'orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.Integer(), nullable=False),
        sa.Column('order_date', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('rental_start_date', sa.Date(), nullable=False),
        sa.Column('rental_end_date', sa.Date(), nullable=False),
        sa.Column('expected_return_date', sa.Date(), nullable=False),
        sa.Column('actual_return_date', sa.Date(), nullable=True),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('amount_paid', sa.Numeric(12, 2), nullable=False),
        sa.Column('payment_status', sa.String(14), nullable=False),
        sa.Column('discount_percentage', sa.Numeric(5, 2), nullable=False),
        sa.Column('tax_rate', sa.Numeric(5, 2), nullable=False),
        sa.Column('discount_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('discount_applied', sa.Boolean(), nullable=False),
        sa.Column('discount_approved_by', sa.String(100), nullable=True),
        sa.Column('default_chargeable_days', sa.Integer(), nullable=False),
        sa.Column('chargeable_days', sa.Integer(), nullable=False),
        sa.Column('adjusted_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('adjustment_difference', sa.Numeric(12, 2), nullable=True),
        sa.Column('status', sa.String(11), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_id', 'orders', ['id'])
    op.create_index('ix_orders_client_id', 'orders', ['client_id'])
    op.create_index('ix_orders_status', 'orders', ['status'])

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(12, 2), nullable=False),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'])
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])
    op.create_index('ix_order_items_product_id', 'order_items', ['product_id'])

    # === 3. WORKERS ===

    op.create_table(
        'workers',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('phone', sa.String(50), nullable=False),
        sa.Column('daily_rate', sa.Numeric(12, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_workers_id', 'workers', ['id'])
    op.create_index('ix_workers_name', 'workers', ['name'])
    op.create_index('ix_workers_is_active', 'workers', ['is_active'])

    op.create_table(
        'worker_attendance',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('worker_id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('hours_worked', sa.Numeric(5, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['worker_id'], ['workers.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('worker_id', 'date', name='uq_worker_attendance_worker_date')
    )
    op.create_index('ix_worker_attendance_id', 'worker_attendance', ['id'])
    op.create_index('ix_worker_attendance_worker_id', 'worker_attendance', ['worker_id'])
    op.create_index('ix_worker_attendance_order_id', 'worker_attendance', ['order_id'])
    op.create_index('ix_worker_attendance_date', 'worker_attendance', ['date'])

    # === 4. WORKER TASKS AND RATES ===

    op.create_table(
        'worker_tasks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('task_type', sa.String(17), nullable=False),
        sa.Column('task_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('created_by', sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_worker_tasks_id', 'worker_tasks', ['id'])
    op.create_index('ix_worker_tasks_order_id', 'worker_tasks', ['order_id'])
    op.create_index('ix_worker_tasks_task_type', 'worker_tasks', ['task_type'])
    op.create_index('ix_worker_tasks_completed_at', 'worker_tasks', ['completed_at'])

    op.create_table(
        'worker_task_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('task_id', sa.Integer(), nullable=False),
        sa.Column('worker_id', sa.Integer(), nullable=False),
        sa.Column('present', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['task_id'], ['worker_tasks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['worker_id'], ['workers.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_worker_task_assignments_id', 'worker_task_assignments', ['id'])
    op.create_index('ix_worker_task_assignments_task_id', 'worker_task_assignments', ['task_id'])
    op.create_index('ix_worker_task_assignments_worker_id', 'worker_task_assignments', ['worker_id'])

    op.create_table(
        'task_rates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('task_type', sa.String(17), nullable=False),
        sa.Column('task_name', sa.String(200), nullable=False),
        sa.Column('rate_per_unit', sa.Numeric(12, 2), nullable=False),
        sa.Column('unit', sa.String(50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_task_rates_id', 'task_rates', ['id'])
    op.create_index('ix_task_rates_task_type', 'task_rates', ['task_type'])
    op.create_index('ix_task_rates_is_active', 'task_rates', ['is_active'])

    # === 5. VIOLATIONS ===

    op.create_table(
        'violations',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('violation_type', sa.String(14), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('penalty_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('resolved', sa.Boolean(), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('resolved_by', sa.String(100), nullable=True),
        sa.Column('paid_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('waived_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('resolution_notes', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_violations_id', 'violations', ['id'])
    op.create_index('ix_violations_order_id', 'violations', ['order_id'])
    op.create_index('ix_violations_violation_type', 'violations', ['violation_type'])
    op.create_index('ix_violations_resolved', 'violations', ['resolved'])


def downgrade() -> None:
    """Drop the RentFlow tables."""
    for table in (
        'violations',
        'task_rates',
        'worker_task_assignments',
        'worker_tasks',
        'worker_attendance',
        'workers',
        'order_items',
        'orders',
        'products',
        'clients',
    ):
        op.drop_table(table)
