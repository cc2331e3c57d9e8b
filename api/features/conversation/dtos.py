"""DTOs for the Conversation feature."""
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from api.features.conversation.models import ConversationModel, MessageModel
from api.shared.dtos import BaseDTO
from api.shared.response import ResponseModel


class SendChatRequest(BaseDTO):
    """One user turn. Empty ``conversation_id``/``model`` mean "not given"."""

    role: str = Field(description="Message role, usually 'user'")
    content: str = Field(description="Message text")
    conversation_id: Optional[str] = Field(default=None, description="Existing conversation id")
    model: Optional[str] = Field(default=None, description="Completion model name")

    @field_validator("role", "content")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value

    @field_validator("conversation_id", "model", mode="before")
    @classmethod
    def _empty_as_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        # Numeric ids are accepted as well as numeric strings
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class EditChatRequest(BaseDTO):
    new_name: str = Field(min_length=1, max_length=255, description="New conversation name")

    @field_validator("new_name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class ConversationDTO(BaseDTO):
    """Conversation DTO."""

    id: str = Field(description="Conversation identifier")
    model: str = Field(description="Completion model")
    conversation_name: str = Field(description="Conversation name")
    user_id: str = Field(description="Owner identifier")
    created_at: Optional[datetime] = Field(default=None, description="Creation timestamp")

    @classmethod
    def from_model(cls, model: ConversationModel) -> "ConversationDTO":
        return cls(
            id=str(model.id),
            model=model.model,
            conversation_name=model.conversation_name,
            user_id=model.user_id,
            created_at=model.created_at,
        )


class MessageDTO(BaseDTO):
    """Conversation message DTO."""

    id: int = Field(description="Message sequence number")
    conversation_id: str = Field(description="Owning conversation")
    role: str = Field(description="Message role")
    content: str = Field(description="Message content")
    timestamp: float = Field(description="Insertion time, epoch seconds")

    @classmethod
    def from_model(cls, model: MessageModel) -> "MessageDTO":
        return cls(
            id=model.id,
            conversation_id=str(model.conversation_id),
            role=model.role,
            content=model.content,
            timestamp=model.timestamp,
        )


class ChatResponse(ResponseModel):
    conversation: ConversationDTO


class ChatListResponse(ResponseModel):
    conversations: List[ConversationDTO] = Field(default_factory=list)


class SendChatResponse(ResponseModel):
    conversation_id: str
    role: str
    content: str
    model: str
    conversation_name: Optional[str] = Field(
        default=None, description="New conversation name when this turn triggered auto-naming"
    )


class MessagesResponse(ResponseModel):
    conversation_id: str
    messages: List[MessageDTO] = Field(default_factory=list)


class DeleteResponse(ResponseModel):
    deleted_count: int = Field(description="Rows removed")


class EditChatResponse(ResponseModel):
    conversation: ConversationDTO
