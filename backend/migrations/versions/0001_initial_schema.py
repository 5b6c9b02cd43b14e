"""initial schema: accounts, customers, services, tasks, bills, complaints, audit

Revision ID: 0001_initial_schema
Revises: 
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps(*names):
    return [sa.Column(n, sa.DateTime(timezone=True), server_default=sa.func.now()) for n in names]


def upgrade():
    op.create_table('technicians',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('full_name', sa.String(length=128), nullable=False),
        sa.Column('contact_number', sa.String(length=20), nullable=False, unique=True),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=128), nullable=True, unique=True),
        sa.Column('company_name', sa.String(length=128), nullable=True),
        sa.Column('city_name', sa.String(length=64), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('fcm_token', sa.String(length=255), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index('ix_technicians_contact_number', 'technicians', ['contact_number'])

    op.create_table('admins',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False, unique=True),
        sa.Column('email', sa.String(length=128), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('is_super_admin', sa.Boolean(), nullable=False, server_default=sa.text('0')),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
        *_timestamps('updated_at'),
    )
    op.create_index('ix_admins_email', 'admins', ['email'])

    op.create_table('customers',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('technician_id', sa.Integer(), sa.ForeignKey('technicians.id'), nullable=False),
        sa.Column('full_name', sa.String(length=128), nullable=False),
        sa.Column('contact_number', sa.String(length=20), nullable=False),
        sa.Column('address', sa.String(length=255), nullable=False),
        sa.Column('area', sa.String(length=128), nullable=True),
        sa.Column('joining_date', sa.Date(), nullable=False),
        sa.Column('tds', sa.Integer(), nullable=True),
        sa.Column('ro_model', sa.String(length=64), nullable=True),
        sa.Column('category', sa.String(length=16), nullable=False),
        sa.Column('number_of_services', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('service_generation_type', sa.String(length=16), nullable=False),
        sa.Column('remark', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('reminders', sa.JSON(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    for col in ('technician_id', 'full_name', 'area', 'status'):
        op.create_index(f'ix_customers_{col}', 'customers', [col])

    op.create_table('tasks',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(length=128), nullable=False),
        sa.Column('technician_id', sa.Integer(), sa.ForeignKey('technicians.id'), nullable=False),
        sa.Column('shared_with_id', sa.Integer(), sa.ForeignKey('technicians.id'), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        *_timestamps('created_at', 'updated_at'),
    )
    op.create_index('ix_tasks_technician_id', 'tasks', ['technician_id'])
    op.create_index('ix_tasks_shared_with_id', 'tasks', ['shared_with_id'])

    op.create_table('services',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('technician_id', sa.Integer(), sa.ForeignKey('technicians.id'), nullable=False),
        sa.Column('service_number', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=16), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('completed_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('parts_used', sa.JSON(), nullable=True),
        sa.Column('task_id', sa.Integer(), sa.ForeignKey('tasks.id'), nullable=True),
        sa.Column('reminders', sa.JSON(), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps('updated_at'),
        sa.UniqueConstraint('customer_id', 'service_number', name='uq_customer_service_number'),
    )
    for col in ('customer_id', 'technician_id', 'status', 'scheduled_date', 'task_id'):
        op.create_index(f'ix_services_{col}', 'services', [col])

    op.create_table('bills',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('technician_id', sa.Integer(), sa.ForeignKey('technicians.id'), nullable=False),
        sa.Column('items', sa.JSON(), nullable=True),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('bill_date', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('payment_method', sa.String(length=16), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    for col in ('customer_id', 'technician_id', 'bill_date', 'status'):
        op.create_index(f'ix_bills_{col}', 'bills', [col])

    op.create_table('complaints',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('customer_id', sa.Integer(), sa.ForeignKey('customers.id'), nullable=False),
        sa.Column('technician_id', sa.Integer(), sa.ForeignKey('technicians.id'), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps('created_at', 'updated_at'),
    )
    for col in ('customer_id', 'technician_id', 'status'):
        op.create_index(f'ix_complaints_{col}', 'complaints', [col])

    op.create_table('audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('actor_id', sa.Integer(), nullable=False),
        sa.Column('actor_role', sa.String(length=16), nullable=False, server_default=''),
        sa.Column('action', sa.String(length=64), nullable=False),
        sa.Column('entity', sa.String(length=64), nullable=True),
        sa.Column('entity_id', sa.String(length=64), nullable=True),
        sa.Column('meta', sa.JSON(), nullable=True),
        *_timestamps('created_at'),
    )
    op.create_index('ix_audit_logs_actor_id', 'audit_logs', ['actor_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])


def downgrade():
    for table in ('audit_logs', 'complaints', 'bills', 'services', 'tasks', 'customers', 'admins', 'technicians'):
        op.drop_table(table)
