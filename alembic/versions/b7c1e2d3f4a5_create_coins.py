"""create_coins

Coins that passed the migration filters, unique per contract address.

Revision ID: b7c1e2d3f4a5
Revises:
Create Date: 2026-10-18 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'b7c1e2d3f4a5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'coins',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('contract_address', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('symbol', sa.String(50), nullable=True),
        sa.Column('creator_wallet', sa.String(64), nullable=True),
        sa.Column('migration_time', sa.DateTime(), nullable=True),
        sa.Column('initial_liquidity', sa.Float(), nullable=True),
        sa.Column('creator_fee', sa.Float(), nullable=True),
        sa.Column('holders', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('contract_address', name='uq_coin_contract_address'),
    )
    op.create_index('idx_coins_creator_wallet', 'coins', ['creator_wallet'])


def downgrade() -> None:
    op.drop_index('idx_coins_creator_wallet', table_name='coins')
    op.drop_table('coins')
