"""Add task ownership

Revision ID: c9e5a7b3d214
Revises: 8b2d4e6f1c53
Create Date: 2025-09-02T10:07:01.460311

Rows created before this revision keep a null user_id and remain visible
to every authenticated user.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = 'c9e5a7b3d214'
down_revision: Union[str, None] = '8b2d4e6f1c53'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table('tasks') as batch_op:
        batch_op.add_column(sa.Column('user_id', sa.Integer(), nullable=True))
        batch_op.create_foreign_key(
            'fk_tasks_user_id_users', 'users', ['user_id'], ['id'], ondelete='CASCADE',
        )
        batch_op.create_index('ix_tasks_user_id', ['user_id'])
        batch_op.create_index('idx_task_user_done', ['user_id', 'done'])


def downgrade() -> None:
    with op.batch_alter_table('tasks') as batch_op:
        batch_op.drop_index('idx_task_user_done')
        batch_op.drop_index('ix_tasks_user_id')
        batch_op.drop_constraint('fk_tasks_user_id_users', type_='foreignkey')
        batch_op.drop_column('user_id')
