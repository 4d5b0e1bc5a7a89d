"""create users and runs tables

Revision ID: 5e1d2c7a9b40
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5e1d2c7a9b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    inspector = sa.inspect(bind)
    tables = inspector.get_table_names()
    if 'users' not in tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=True),
            sa.Column('role', sa.String(length=20), nullable=False, server_default='runner'),
            sa.Column('goal', sa.Float(), nullable=False, server_default='1'),
            sa.Column('progress', sa.Float(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
        op.create_index('ix_users_id', 'users', ['id'])
    if 'runs' not in tables:
        op.create_table(
            'runs',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column('distance', sa.Float(), nullable=False),
            sa.Column('duration', sa.Float(), nullable=False),
            sa.Column('pace', sa.Float(), nullable=True),
            sa.Column('date', sa.DateTime(timezone=True), nullable=False),
            sa.Column('location', sa.String(length=500), nullable=True),
            sa.Column('source', sa.String(length=20), nullable=False, server_default='manual'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
        op.create_index('ix_runs_id', 'runs', ['id'])
        op.create_index('ix_runs_user_id_date', 'runs', ['user_id', 'date'])


def downgrade() -> None:
    # Safe drop if exists
    op.execute('DROP TABLE IF EXISTS runs')
    op.execute('DROP TABLE IF EXISTS users')
