import pytest
from sqlalchemy.exc import OperationalError

from api.features.conversation.exceptions import ConversationNotFoundError, NoConversationsError
from api.features.conversation.orchestrator import ChatOrchestrator
from api.features.conversation.repositories.conversation_repository import ConversationRepository
from api.features.conversation.repositories.message_repository import MessageRepository
from api.features.conversation.service import ConversationService
from api.shared.exceptions import StorageError
from api.shared.unit_of_work import transaction

MODEL = "Meta-Llama-3-1-8B-Instruct-FP8"


def db_failure(statement: str) -> OperationalError:
    return OperationalError(statement, {}, Exception("database is locked"))


async def seed(session, conversation_id: int, user_id: str = "alice"):
    async with transaction(session, "seed"):
        await ConversationRepository(session).ensure(conversation_id, model=MODEL, user_id=user_id)
        messages = MessageRepository(session)
        await messages.append(conversation_id, role="user", content="Hi", timestamp=1.0)
        await messages.append(conversation_id, role="assistant", content="Hello", timestamp=2.0)


@pytest.fixture
def service():
    return ConversationService()


@pytest.mark.asyncio
async def test_transaction_commits_on_success(session):
    async with transaction(session, "create"):
        await ConversationRepository(session).ensure(1, model=MODEL, user_id="alice")

    await session.rollback()
    assert await ConversationRepository(session).exists(1)


@pytest.mark.asyncio
async def test_transaction_rolls_back_and_maps_driver_errors(session):
    with pytest.raises(StorageError) as exc_info:
        async with transaction(session, "create"):
            await ConversationRepository(session).ensure(1, model=MODEL, user_id="alice")
            raise db_failure("INSERT INTO conversations")

    assert exc_info.value.error_code == "STORAGE_ERROR"
    assert exc_info.value.details == {"operation": "create"}
    assert "database is locked" not in exc_info.value.message
    assert not await ConversationRepository(session).exists(1)


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_other_exceptions(session):
    with pytest.raises(RuntimeError):
        async with transaction(session, "create"):
            await ConversationRepository(session).ensure(1, model=MODEL, user_id="alice")
            raise RuntimeError("cancelled midway")

    assert not await ConversationRepository(session).exists(1)


@pytest.mark.asyncio
async def test_delete_conversation_is_all_or_nothing(session, service, monkeypatch):
    await seed(session, 1)

    async def failing_delete(self, entity_id):
        raise db_failure("DELETE FROM conversations")

    monkeypatch.setattr(ConversationRepository, "delete", failing_delete)
    with pytest.raises(StorageError):
        await service.delete_conversation("1", db_session=session)

    assert len(await MessageRepository(session).list_by_conversation(1)) == 2
    assert await ConversationRepository(session).exists(1)


@pytest.mark.asyncio
async def test_delete_missing_conversation_raises_not_found(session, service):
    with pytest.raises(ConversationNotFoundError):
        await service.delete_conversation("7", db_session=session)


@pytest.mark.asyncio
async def test_delete_all_conversations_is_all_or_nothing(session, service, monkeypatch):
    await seed(session, 1)
    await seed(session, 2)

    async def failing_delete_by_owner(self, user_id):
        raise RuntimeError("connection dropped")

    monkeypatch.setattr(ConversationRepository, "delete_by_owner", failing_delete_by_owner)
    with pytest.raises(RuntimeError):
        await service.delete_all_conversations("alice", db_session=session)

    messages = MessageRepository(session)
    assert len(await messages.list_by_conversation(1)) == 2
    assert len(await messages.list_by_conversation(2)) == 2


@pytest.mark.asyncio
async def test_delete_all_for_owner_without_conversations(session, service):
    await seed(session, 1, user_id="bob")

    with pytest.raises(NoConversationsError):
        await service.delete_all_conversations("alice", db_session=session)

    assert len(await MessageRepository(session).list_by_conversation(1)) == 2


@pytest.mark.asyncio
async def test_store_failure_aborts_send_chat_before_upstream(
    session, completion_client, fake_api, monkeypatch
):
    async def failing_append(self, conversation_id, *, role, content, timestamp):
        raise db_failure("INSERT INTO messages")

    monkeypatch.setattr(MessageRepository, "append", failing_append)
    orchestrator = ChatOrchestrator(completion_client, default_model=MODEL)

    with pytest.raises(StorageError):
        await orchestrator.send_chat(
            role="user",
            content="Hi",
            conversation_id=None,
            model=None,
            user_id="alice",
            db_session=session,
        )

    assert fake_api.requests == []
    assert await ConversationRepository(session).count() == 0
