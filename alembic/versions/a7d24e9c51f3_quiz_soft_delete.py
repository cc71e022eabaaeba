"""add quizzes.deleted_at for soft delete

Revision ID: a7d24e9c51f3
Revises: 3f6c1d2a7b90
Create Date: 2026-10-18
"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "a7d24e9c51f3"
down_revision = "3f6c1d2a7b90"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("quizzes") as batch_op:
        batch_op.add_column(sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True))
        batch_op.create_index("ix_quizzes_deleted_at", ["deleted_at"])


def downgrade() -> None:
    with op.batch_alter_table("quizzes") as batch_op:
        batch_op.drop_index("ix_quizzes_deleted_at")
        batch_op.drop_column("deleted_at")
