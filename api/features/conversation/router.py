"""Router for the Conversation feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.controller import ConversationController
from api.features.conversation.dtos import (
    ChatListResponse,
    ChatResponse,
    DeleteResponse,
    EditChatRequest,
    EditChatResponse,
    MessagesResponse,
    SendChatRequest,
    SendChatResponse,
)
from api.shared.db import get_db_session
from api.shared.identity import resolve_owner
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.get("/get-chat-by-id/{conversation_id}", response_model=ChatResponse)
@inject
async def get_chat_by_id(
    conversation_id: str,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.get_chat(conversation_id, db_session=db_session)


@router.get("/get-chat-list", response_model=ChatListResponse)
@inject
async def get_chat_list(
    user_id: str = Depends(resolve_owner),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.list_chats(user_id=user_id, db_session=db_session)


@router.post("/send-chat", response_model=SendChatResponse)
@inject
async def send_chat(
    request: SendChatRequest,
    user_id: str = Depends(resolve_owner),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.send_chat(request, user_id=user_id, db_session=db_session)


@router.get("/get-all-msgs-by-id/{conversation_id}", response_model=MessagesResponse)
@inject
async def get_all_messages_by_id(
    conversation_id: str,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.get_messages(conversation_id, db_session=db_session)


@router.delete("/delete-chat/{conversation_id}", response_model=DeleteResponse)
@inject
async def delete_chat(
    conversation_id: str,
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.delete_chat(conversation_id, db_session=db_session)


@router.delete("/delete-all-chat", response_model=DeleteResponse)
@inject
async def delete_all_chat(
    user_id: str = Depends(resolve_owner),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.delete_all_chats(user_id=user_id, db_session=db_session)


@router.put("/edit-chat/{conversation_id}", response_model=EditChatResponse)
@inject
async def edit_chat(
    conversation_id: str,
    request: EditChatRequest,
    user_id: str = Depends(resolve_owner),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    return await controller.edit_chat(
        conversation_id, request, user_id=user_id, db_session=db_session
    )
