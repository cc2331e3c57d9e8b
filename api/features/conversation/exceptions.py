"""Exceptions for the Conversation feature."""
from typing import Any, Dict, Optional

from api.shared.exceptions import NotFoundError, UpstreamError, ValidationError


class ConversationNotFoundError(NotFoundError):
    """Raised when a conversation is not found (or not owned by the caller)."""

    def __init__(self, conversation_id: str):
        super().__init__("Conversation", str(conversation_id), "CONVERSATION_NOT_FOUND")


class NoConversationsError(NotFoundError):
    """Raised when a bulk operation finds no conversations for an owner."""

    def __init__(self, user_id: str):
        super().__init__("Conversations for user", user_id, "NO_CONVERSATIONS")


class InvalidConversationIdError(ValidationError):
    """Raised when a conversation id is not a positive integer string within the key range."""

    def __init__(self, conversation_id: str):
        super().__init__(
            f"Conversation id '{conversation_id}' must be a positive 32-bit integer",
            {"conversation_id": conversation_id},
        )


class CompletionError(UpstreamError):
    """Raised when the chat-completion endpoint fails or returns an unusable body."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__("completion", message, details)
