"""booking core tables

Revision ID: 4b1f0c2d9a7e
Revises:
Create Date: 2026-10-18 10:12:41.305118

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4b1f0c2d9a7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Provider profiles
    op.create_table(
        'providers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('display_name', sa.String(200), nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_providers_user_id', 'providers', ['user_id'], unique=True)

    # 2. Services offered by providers
    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('provider_id', sa.Uuid(), sa.ForeignKey('providers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price', sa.Numeric(10, 2), nullable=False, server_default='0'),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_services_provider_id', 'services', ['provider_id'])

    # 3. Bookable windows
    op.create_table(
        'time_slots',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('provider_id', sa.Uuid(), sa.ForeignKey('providers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('day', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('provider_id', 'day', 'start_time', 'end_time', name='uq_time_slots_provider_window'),
        sa.CheckConstraint('start_time < end_time', name='ck_time_slots_start_before_end'),
    )
    op.create_index('ix_time_slots_service_id', 'time_slots', ['service_id'])
    op.create_index('ix_time_slots_provider_day_start', 'time_slots', ['provider_id', 'day', 'start_time'])
    op.create_index('ix_time_slots_available_day', 'time_slots', ['is_available', 'day'])

    # 4. Appointments (soft-cancelled, never deleted)
    op.create_table(
        'appointments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('client_id', sa.Uuid(), nullable=False),
        sa.Column('time_slot_id', sa.Uuid(), sa.ForeignKey('time_slots.id', ondelete='SET NULL'), nullable=True),
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('provider_id', sa.Uuid(), sa.ForeignKey('providers.id'), nullable=False),
        sa.Column('appointment_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='confirmed'),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('cancelled_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('cancellation_reason', sa.Text(), nullable=True),
    )
    op.create_index('ix_appointments_client_id', 'appointments', ['client_id'])
    op.create_index('ix_appointments_provider_id', 'appointments', ['provider_id'])
    op.create_index('ix_appointments_client_created', 'appointments', ['client_id', 'created_at'])

    # At most one non-cancelled appointment per slot
    op.create_index(
        'uq_appointments_active_slot',
        'appointments',
        ['time_slot_id'],
        unique=True,
        postgresql_where=sa.text("status <> 'cancelled'"),
        sqlite_where=sa.text("status <> 'cancelled'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_appointments_active_slot', table_name='appointments')
    op.drop_index('ix_appointments_client_created', table_name='appointments')
    op.drop_index('ix_appointments_provider_id', table_name='appointments')
    op.drop_index('ix_appointments_client_id', table_name='appointments')
    op.drop_table('appointments')

    op.drop_index('ix_time_slots_available_day', table_name='time_slots')
    op.drop_index('ix_time_slots_provider_day_start', table_name='time_slots')
    op.drop_index('ix_time_slots_service_id', table_name='time_slots')
    op.drop_table('time_slots')

    op.drop_index('ix_services_provider_id', table_name='services')
    op.drop_table('services')

    op.drop_index('ix_providers_user_id', table_name='providers')
    op.drop_table('providers')
