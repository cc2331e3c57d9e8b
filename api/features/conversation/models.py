"""Domain models for the Conversation feature."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from api.features.conversation.entities.conversation import (
    MAX_CONVERSATION_ID,
    Conversation as ConversationEntity,
)
from api.features.conversation.entities.message import Message as MessageEntity
from api.features.conversation.exceptions import InvalidConversationIdError


def parse_conversation_id(raw: str) -> int:
    """Convert an external (string) conversation id to the stored integer key."""
    value = (raw or "").strip()
    if not (value.isascii() and value.isdigit()) or not 0 < int(value) <= MAX_CONVERSATION_ID:
        raise InvalidConversationIdError(raw)
    return int(value)


class ConversationModel(BaseModel):
    """Domain model for Conversation."""

    id: int = Field(description="Conversation identifier")
    model: str = Field(description="Completion model used by the conversation")
    conversation_name: str = Field(description="Human readable label")
    user_id: str = Field(description="Owner identifier")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, entity: ConversationEntity) -> "ConversationModel":
        return cls(
            id=entity.id,
            model=entity.model,
            conversation_name=entity.conversation_name,
            user_id=entity.user_id,
            created_at=entity.created_at,
        )


class MessageModel(BaseModel):
    """Domain model for Message."""

    id: int = Field(description="Message sequence number")
    conversation_id: int = Field(description="Owning conversation")
    role: str = Field(description="Message role")
    content: str = Field(description="Message text")
    timestamp: float = Field(description="Insertion time, epoch seconds")

    class Config:
        from_attributes = True

    @classmethod
    def from_entity(cls, entity: MessageEntity) -> "MessageModel":
        return cls(
            id=entity.id,
            conversation_id=entity.conversation_id,
            role=entity.role,
            content=entity.content,
            timestamp=entity.timestamp,
        )

    def as_chat_message(self) -> dict[str, str]:
        """The ``{role, content}`` pair sent upstream."""
        return {"role": self.role, "content": self.content}


class ChatReply(BaseModel):
    """Outcome of one send-chat round trip."""

    conversation_id: int
    role: str
    content: str
    model: str
    conversation_name: Optional[str] = None
