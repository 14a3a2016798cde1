"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create threads and chat_histories tables."""
    op.create_table(
        "threads",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="threads_pkey"),
    )
    op.create_index("idx_threads_user_updated_at", "threads", ["user_id", "updated_at"])
    op.create_index("idx_threads_created_at", "threads", ["created_at"])

    op.create_table(
        "chat_histories",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("thread_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.Text(), nullable=False),
        sa.Column("user_message", sa.Text(), nullable=False),
        sa.Column("assistant_message", sa.Text(), nullable=False),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(
            ["thread_id"],
            ["threads.id"],
            name="chat_histories_thread_id_fkey",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name="chat_histories_pkey"),
    )
    op.create_index(
        "idx_chat_histories_thread_created_at", "chat_histories", ["thread_id", "created_at"]
    )
    op.create_index("idx_chat_histories_user_id", "chat_histories", ["user_id"])
    op.create_index("idx_chat_histories_created_at", "chat_histories", ["created_at"])


def downgrade() -> None:
    """Drop threads and chat_histories tables."""
    op.drop_index("idx_chat_histories_created_at", table_name="chat_histories")
    op.drop_index("idx_chat_histories_user_id", table_name="chat_histories")
    op.drop_index("idx_chat_histories_thread_created_at", table_name="chat_histories")
    op.drop_table("chat_histories")
    op.drop_index("idx_threads_created_at", table_name="threads")
    op.drop_index("idx_threads_user_updated_at", table_name="threads")
    op.drop_table("threads")
