"""Send-chat flow: store reads and writes around one completion call."""
import time
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.completion import CompletionClient
from api.features.conversation.models import ChatReply, MessageModel, parse_conversation_id
from api.features.conversation.repositories.conversation_repository import ConversationRepository
from api.features.conversation.repositories.message_repository import MessageRepository
from api.shared.unit_of_work import transaction

logger = structlog.get_logger("bloom.conversation.orchestrator")

# History length (after the new user turn) at which the conversation is named
AUTO_NAME_HISTORY_LENGTH = 3


class ChatOrchestrator:
    """Runs one user turn through the store and the completion endpoint.

    The user turn is committed before the upstream call, so an upstream
    failure leaves it persisted without a reply. The reply and the optional
    auto-generated name are committed in their own transactions afterwards.
    """

    def __init__(self, completion_client: CompletionClient, default_model: str):
        self.completion_client = completion_client
        self.default_model = default_model

    async def send_chat(
        self,
        *,
        role: str,
        content: str,
        conversation_id: Optional[str],
        model: Optional[str],
        user_id: str,
        db_session: AsyncSession,
    ) -> ChatReply:
        requested_id = parse_conversation_id(conversation_id) if conversation_id else None
        model_name = model or self.default_model

        conversations = ConversationRepository(db_session)
        messages = MessageRepository(db_session)

        async with transaction(db_session, "append_user_message"):
            resolved_id = await conversations.ensure(
                requested_id, model=model_name, user_id=user_id
            )
            history = [
                MessageModel.from_entity(m).as_chat_message()
                for m in await messages.list_by_conversation(resolved_id)
            ]
            history.append({"role": role, "content": content})
            await messages.append(
                resolved_id, role=role, content=content, timestamp=time.time()
            )

        log = logger.bind(conversation_id=resolved_id, model=model_name)
        log.info("user_message_persisted", history_length=len(history))

        result = await self.completion_client.complete(model_name, history)

        async with transaction(db_session, "append_assistant_message"):
            await messages.append(
                resolved_id,
                role=result.role,
                content=result.content,
                timestamp=time.time(),
            )
        log.info("assistant_message_persisted")

        conversation_name = None
        if len(history) == AUTO_NAME_HISTORY_LENGTH:
            conversation_name = await self._auto_name(
                resolved_id, model_name, history, result.role, result.content, db_session
            )

        return ChatReply(
            conversation_id=resolved_id,
            role=result.role,
            content=result.content,
            model=model_name,
            conversation_name=conversation_name,
        )

    async def _auto_name(
        self,
        conversation_id: int,
        model: str,
        history: list,
        reply_role: str,
        reply_content: str,
        db_session: AsyncSession,
    ) -> str:
        transcript = history + [{"role": reply_role, "content": reply_content}]
        name = await self.completion_client.summarize(model, transcript)
        async with transaction(db_session, "rename_conversation"):
            await ConversationRepository(db_session).set_name(conversation_id, name)
        logger.info("conversation_auto_named", conversation_id=conversation_id, name=name)
        return name
