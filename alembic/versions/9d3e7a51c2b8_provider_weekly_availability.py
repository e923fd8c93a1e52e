"""provider weekly availability

Revision ID: 9d3e7a51c2b8
Revises: 4b1f0c2d9a7e
Create Date: 2026-10-18 15:40:02.771930

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '9d3e7a51c2b8'
down_revision: Union[str, Sequence[str], None] = '4b1f0c2d9a7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'provider_availabilities',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('provider_id', sa.Uuid(), sa.ForeignKey('providers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),  # 0=Monday, 6=Sunday
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('start_time < end_time', name='ck_provider_availabilities_start_before_end'),
        sa.CheckConstraint('day_of_week BETWEEN 0 AND 6', name='ck_provider_availabilities_day_of_week'),
    )
    op.create_index(
        'ix_provider_availabilities_provider_day',
        'provider_availabilities',
        ['provider_id', 'day_of_week', 'start_time'],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('ix_provider_availabilities_provider_day', table_name='provider_availabilities')
    op.drop_table('provider_availabilities')
