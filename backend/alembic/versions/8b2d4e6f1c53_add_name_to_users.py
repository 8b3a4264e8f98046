"""Add display name to users

Revision ID: 8b2d4e6f1c53
Revises: 3f1a9c2e7b40
Create Date: 2025-09-02T04:52:15.966104
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = '8b2d4e6f1c53'
down_revision: Union[str, None] = '3f1a9c2e7b40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Existing accounts get an empty name until they update their profile
    with op.batch_alter_table('users') as batch_op:
        batch_op.add_column(sa.Column('name', sa.String(100), nullable=False, server_default=''))


def downgrade() -> None:
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('name')
