"""Conversation entity."""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity

DEFAULT_CONVERSATION_NAME = "New Conversation"
# Upper bound of the 32-bit INTEGER primary key
MAX_CONVERSATION_ID = 2**31 - 1


class Conversation(BaseEntity):
    """A named thread of messages owned by one user."""

    __tablename__ = "conversations"

    # Allocated by the repository (max + 1, collision-checked) or supplied by the caller
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    model: Mapped[str] = mapped_column(String(255), nullable=False)
    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    conversation_name: Mapped[str] = mapped_column(
        String(255), nullable=False, default=DEFAULT_CONVERSATION_NAME
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now()
    )
