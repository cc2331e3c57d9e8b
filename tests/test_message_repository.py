import pytest

from api.features.conversation.repositories.conversation_repository import ConversationRepository
from api.features.conversation.repositories.message_repository import MessageRepository

MODEL = "Meta-Llama-3-1-8B-Instruct-FP8"


@pytest.fixture
def messages(session):
    return MessageRepository(session)


@pytest.mark.asyncio
async def test_list_is_ordered_by_timestamp(session, messages):
    await ConversationRepository(session).ensure(1, model=MODEL, user_id="alice")
    for ts in (30.0, 10.0, 20.0):
        await messages.append(1, role="user", content=f"at {ts}", timestamp=ts)

    listed = await messages.list_by_conversation(1)

    timestamps = [m.timestamp for m in listed]
    assert timestamps == sorted(timestamps)
    assert [m.content for m in listed] == ["at 10.0", "at 20.0", "at 30.0"]


@pytest.mark.asyncio
async def test_equal_timestamps_keep_insertion_order(session, messages):
    await ConversationRepository(session).ensure(1, model=MODEL, user_id="alice")
    await messages.append(1, role="user", content="question", timestamp=5.0)
    await messages.append(1, role="assistant", content="answer", timestamp=5.0)

    listed = await messages.list_by_conversation(1)

    assert [m.role for m in listed] == ["user", "assistant"]


@pytest.mark.asyncio
async def test_content_is_stored_exactly(session, messages):
    await ConversationRepository(session).ensure(1, model=MODEL, user_id="alice")
    content = "  Xin chào 👋\n<b>multi-line</b>\ttext  "
    await messages.append(1, role="system", content=content, timestamp=1.0)

    [stored] = await messages.list_by_conversation(1)

    assert stored.role == "system"
    assert stored.content == content


@pytest.mark.asyncio
async def test_unknown_conversation_has_no_messages(messages):
    assert await messages.list_by_conversation(999) == []


@pytest.mark.asyncio
async def test_delete_by_owner_leaves_other_owners(session, messages):
    conversations = ConversationRepository(session)
    await conversations.ensure(1, model=MODEL, user_id="alice")
    await conversations.ensure(2, model=MODEL, user_id="bob")
    await messages.append(1, role="user", content="mine", timestamp=1.0)
    await messages.append(1, role="assistant", content="reply", timestamp=2.0)
    await messages.append(2, role="user", content="theirs", timestamp=3.0)

    assert await messages.delete_by_owner("alice") == 2
    assert await messages.list_by_conversation(1) == []
    assert len(await messages.list_by_conversation(2)) == 1
