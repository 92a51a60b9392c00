"""Create metering, billing and notification tables

Revision ID: a1c4e7f90b21
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c4e7f90b21'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_profiles_role', 'profiles', ['role'])

    op.create_table(
        'meters',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('premises_id', sa.String(36), nullable=True),
        sa.Column('meter_number', sa.String(50), nullable=False, unique=True),
        sa.Column('meter_type', sa.String(20), nullable=False, server_default='electricity'),
        sa.Column('billing_type', sa.String(20), nullable=False, server_default='postpaid'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('tariff_rate', sa.Float(), nullable=False, server_default='0'),
        sa.Column('current_balance', sa.Float(), nullable=False, server_default='0'),
        sa.Column('threshold_limit', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('tariff_rate >= 0', name='ck_meters_tariff_rate_non_negative'),
    )
    op.create_index('ix_meters_user_id', 'meters', ['user_id'])
    op.create_index('ix_meters_billing_type', 'meters', ['billing_type'])

    op.create_table(
        'meter_readings',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('meter_id', sa.String(36), sa.ForeignKey('meters.id'), nullable=False),
        sa.Column('reading', sa.Float(), nullable=False),
        sa.Column('reading_date', sa.DateTime(), nullable=False),
        sa.Column('is_manual', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('consumption', sa.Float(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_meter_readings_meter_id', 'meter_readings', ['meter_id'])
    op.create_index('ix_meter_readings_reading_date', 'meter_readings', ['reading_date'])

    op.create_table(
        'bills',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('meter_id', sa.String(36), sa.ForeignKey('meters.id'), nullable=False),
        sa.Column('bill_number', sa.String(100), nullable=False, unique=True),
        sa.Column('billing_period_start', sa.Date(), nullable=False),
        sa.Column('billing_period_end', sa.Date(), nullable=False),
        sa.Column('previous_reading', sa.Float(), nullable=False),
        sa.Column('current_reading', sa.Float(), nullable=False),
        sa.Column('consumption', sa.Float(), nullable=False),
        sa.Column('rate', sa.Float(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('tax_amount', sa.Float(), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_bills_meter_id', 'bills', ['meter_id'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('transaction_number', sa.String(100), nullable=False, unique=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('meter_id', sa.String(36), sa.ForeignKey('meters.id'), nullable=True),
        sa.Column('bill_id', sa.String(36), sa.ForeignKey('bills.id'), nullable=True),
        sa.Column('transaction_type', sa.String(20), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('payment_method', sa.String(50), nullable=False),
        sa.Column('payment_reference', sa.String(255), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('transaction_date', sa.DateTime(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('ix_transactions_bill_id', 'transactions', ['bill_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('meter_id', sa.String(36), sa.ForeignKey('meters.id'), nullable=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('notification_type', sa.String(20), nullable=False, server_default='info'),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'reports',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(36), nullable=False),
        sa.Column('report_type', sa.String(20), nullable=False),
        sa.Column('parameters', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_reports_user_id', 'reports', ['user_id'])


def downgrade() -> None:
    op.drop_table('reports')
    op.drop_table('notifications')
    op.drop_table('transactions')
    op.drop_table('bills')
    op.drop_table('meter_readings')
    op.drop_table('meters')
    op.drop_table('profiles')
