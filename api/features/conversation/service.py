"""Service layer for the Conversation feature."""
from typing import List

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.exceptions import (
    ConversationNotFoundError,
    NoConversationsError,
)
from api.features.conversation.models import (
    ConversationModel,
    MessageModel,
    parse_conversation_id,
)
from api.features.conversation.repositories.conversation_repository import ConversationRepository
from api.features.conversation.repositories.message_repository import MessageRepository
from api.shared.unit_of_work import transaction

logger = structlog.get_logger("bloom.conversation.service")


class ConversationService:
    """Read, rename and delete operations on stored conversations."""

    async def get_conversation(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> ConversationModel:
        """Get conversation by ID."""
        key = parse_conversation_id(conversation_id)
        async with transaction(db_session, "get_conversation"):
            entity = await ConversationRepository(db_session).get_by_id(key)
        if entity is None:
            raise ConversationNotFoundError(conversation_id)
        return ConversationModel.from_entity(entity)

    async def list_conversations(
        self, user_id: str, *, db_session: AsyncSession
    ) -> List[ConversationModel]:
        """Conversations owned by the caller, newest first. Empty is not an error."""
        async with transaction(db_session, "list_conversations"):
            entities = await ConversationRepository(db_session).list_by_owner(user_id)
        return [ConversationModel.from_entity(entity) for entity in entities]

    async def rename_conversation(
        self,
        conversation_id: str,
        new_name: str,
        *,
        user_id: str,
        db_session: AsyncSession,
    ) -> ConversationModel:
        key = parse_conversation_id(conversation_id)
        async with transaction(db_session, "rename_conversation"):
            entity = await ConversationRepository(db_session).rename(
                key, user_id=user_id, new_name=new_name
            )
            if entity is None:
                raise ConversationNotFoundError(conversation_id)
            model = ConversationModel.from_entity(entity)
        logger.info("conversation_renamed", conversation_id=key, user_id=user_id)
        return model

    async def delete_conversation(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> int:
        """Delete a conversation and its messages in one transaction.

        Returns the number of messages removed.
        """
        key = parse_conversation_id(conversation_id)
        async with transaction(db_session, "delete_conversation"):
            removed_messages = await MessageRepository(db_session).delete_by_conversation(key)
            removed = await ConversationRepository(db_session).delete(key)
            if removed == 0:
                raise ConversationNotFoundError(conversation_id)
        logger.info(
            "conversation_deleted", conversation_id=key, messages_deleted=removed_messages
        )
        return removed_messages

    async def delete_all_conversations(
        self, user_id: str, *, db_session: AsyncSession
    ) -> int:
        """Delete every conversation the caller owns; returns how many were removed."""
        async with transaction(db_session, "delete_all_conversations"):
            await MessageRepository(db_session).delete_by_owner(user_id)
            removed = await ConversationRepository(db_session).delete_by_owner(user_id)
            if removed == 0:
                raise NoConversationsError(user_id)
        logger.info("conversations_deleted", user_id=user_id, count=removed)
        return removed

    async def list_messages(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> List[MessageModel]:
        """Ordered history of one conversation; empty when it has no messages."""
        key = parse_conversation_id(conversation_id)
        async with transaction(db_session, "list_messages"):
            entities = await MessageRepository(db_session).list_by_conversation(key)
        return [MessageModel.from_entity(entity) for entity in entities]
