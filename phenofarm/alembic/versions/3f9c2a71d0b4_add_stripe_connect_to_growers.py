"""Add payment connect fields to growers table

Revision ID: 3f9c2a71d0b4
Revises: 
Create Date: 2026-02-09 10:42:17.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Revision identifiers used by Alembic
revision: str = '3f9c2a71d0b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Connected payment account of the grower and its onboarding state
    op.add_column('growers', sa.Column('stripe_account_id', sa.String(), nullable=True))
    op.add_column('growers', sa.Column('stripe_account_status', sa.String(), nullable=True))


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('growers') as batch_op:
        batch_op.drop_column('stripe_account_status')
        batch_op.drop_column('stripe_account_id')
