"""Controller for the Conversation feature."""
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.dtos import (
    ChatListResponse,
    ChatResponse,
    ConversationDTO,
    DeleteResponse,
    EditChatRequest,
    EditChatResponse,
    MessageDTO,
    MessagesResponse,
    SendChatRequest,
    SendChatResponse,
)
from api.features.conversation.orchestrator import ChatOrchestrator
from api.features.conversation.service import ConversationService


class ConversationController:
    """Maps HTTP DTOs to service and orchestrator calls."""

    def __init__(
        self,
        conversation_service: ConversationService,
        chat_orchestrator: ChatOrchestrator,
    ):
        self.conversation_service = conversation_service
        self.chat_orchestrator = chat_orchestrator

    async def get_chat(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> ChatResponse:
        model = await self.conversation_service.get_conversation(
            conversation_id, db_session=db_session
        )
        return ChatResponse(
            message="Conversation fetched", conversation=ConversationDTO.from_model(model)
        )

    async def list_chats(self, *, user_id: str, db_session: AsyncSession) -> ChatListResponse:
        models = await self.conversation_service.list_conversations(
            user_id, db_session=db_session
        )
        return ChatListResponse(
            message="Conversations listed",
            conversations=[ConversationDTO.from_model(m) for m in models],
        )

    async def send_chat(
        self,
        request: SendChatRequest,
        *,
        user_id: str,
        db_session: AsyncSession,
    ) -> SendChatResponse:
        reply = await self.chat_orchestrator.send_chat(
            role=request.role,
            content=request.content,
            conversation_id=request.conversation_id,
            model=request.model,
            user_id=user_id,
            db_session=db_session,
        )
        return SendChatResponse(
            message="Chat completed",
            conversation_id=str(reply.conversation_id),
            role=reply.role,
            content=reply.content,
            model=reply.model,
            conversation_name=reply.conversation_name,
        )

    async def get_messages(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> MessagesResponse:
        models = await self.conversation_service.list_messages(
            conversation_id, db_session=db_session
        )
        return MessagesResponse(
            message="Messages fetched",
            conversation_id=conversation_id,
            messages=[MessageDTO.from_model(m) for m in models],
        )

    async def delete_chat(
        self, conversation_id: str, *, db_session: AsyncSession
    ) -> DeleteResponse:
        await self.conversation_service.delete_conversation(
            conversation_id, db_session=db_session
        )
        return DeleteResponse(message="Conversation deleted", deleted_count=1)

    async def delete_all_chats(
        self, *, user_id: str, db_session: AsyncSession
    ) -> DeleteResponse:
        removed = await self.conversation_service.delete_all_conversations(
            user_id, db_session=db_session
        )
        return DeleteResponse(message="Conversations deleted", deleted_count=removed)

    async def edit_chat(
        self,
        conversation_id: str,
        request: EditChatRequest,
        *,
        user_id: str,
        db_session: AsyncSession,
    ) -> EditChatResponse:
        model = await self.conversation_service.rename_conversation(
            conversation_id, request.new_name, user_id=user_id, db_session=db_session
        )
        return EditChatResponse(
            message="Conversation renamed", conversation=ConversationDTO.from_model(model)
        )
