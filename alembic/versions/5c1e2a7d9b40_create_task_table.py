"""create task table

Revision ID: 5c1e2a7d9b40
Revises: 
Create Date: 2026-10-17 10:12:31.481203

"""
from alembic import op
import sqlalchemy as sa


revision = '5c1e2a7d9b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("is_completed", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_task_user_id", "task", ["user_id"], unique=False)
    op.create_index("ix_task_created_at", "task", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_task_created_at", table_name="task")
    op.drop_index("ix_task_user_id", table_name="task")
    op.drop_table("task")
