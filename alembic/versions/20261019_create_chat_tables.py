"""Create conversations and messages tables

Revision ID: 20261019_create_chat_tables
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_create_chat_tables"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "conversations",
        # Allocated by the application, not by a sequence
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("model", sa.String(255), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column(
            "conversation_name",
            sa.String(255),
            nullable=False,
            server_default="New Conversation",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            server_default=sa.text("NOW()"),
        ),
    )

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "conversation_id",
            sa.Integer,
            sa.ForeignKey("conversations.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("role", sa.String(255), nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.Column("timestamp", sa.Float, nullable=False),
    )

    op.create_index("ix_conversations_user_id", "conversations", ["user_id"])
    op.create_index(
        "ix_messages_conversation_timestamp", "messages", ["conversation_id", "timestamp"]
    )


def downgrade() -> None:
    op.drop_index("ix_messages_conversation_timestamp", table_name="messages")
    op.drop_index("ix_conversations_user_id", table_name="conversations")

    op.drop_table("messages")
    op.drop_table("conversations")
