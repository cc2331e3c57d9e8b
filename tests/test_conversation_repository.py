import pytest

from api.features.conversation.entities.conversation import (
    DEFAULT_CONVERSATION_NAME,
    MAX_CONVERSATION_ID,
)
from api.features.conversation.repositories.conversation_repository import ConversationRepository

MODEL = "Meta-Llama-3-1-8B-Instruct-FP8"


@pytest.mark.asyncio
async def test_get_most_recent_id_on_empty_store(session):
    repo = ConversationRepository(session)
    assert await repo.get_most_recent_id() == 0


@pytest.mark.asyncio
async def test_ensure_with_new_id_creates_one_row(session):
    repo = ConversationRepository(session)

    first = await repo.ensure(5, model=MODEL, user_id="alice")
    second = await repo.ensure(5, model="other-model", user_id="bob")

    assert first == second == 5
    assert await repo.count() == 1
    stored = await repo.get_by_id(5)
    assert stored.user_id == "alice"
    assert stored.model == MODEL
    assert stored.conversation_name == DEFAULT_CONVERSATION_NAME


@pytest.mark.asyncio
async def test_ensure_without_id_allocates_next_id(session):
    repo = ConversationRepository(session)

    assert await repo.ensure(None, model=MODEL, user_id="alice") == 1
    assert await repo.ensure(None, model=MODEL, user_id="alice") == 2
    await repo.ensure(10, model=MODEL, user_id="bob")
    assert await repo.ensure(None, model=MODEL, user_id="alice") == 11


@pytest.mark.asyncio
async def test_try_insert_reports_taken_id(session):
    repo = ConversationRepository(session)
    await repo.ensure(3, model=MODEL, user_id="alice")

    assert await repo._try_insert(3, model=MODEL, user_id="bob") is False
    assert (await repo.get_by_id(3)).user_id == "alice"


@pytest.mark.asyncio
async def test_list_by_owner_newest_first(session):
    repo = ConversationRepository(session)
    for _ in range(3):
        await repo.ensure(None, model=MODEL, user_id="alice")
    await repo.ensure(None, model=MODEL, user_id="bob")

    owned = await repo.list_by_owner("alice")

    assert [c.id for c in owned] == [3, 2, 1]
    assert await repo.list_by_owner("nobody") == []


@pytest.mark.asyncio
async def test_rename_requires_matching_owner(session):
    repo = ConversationRepository(session)
    await repo.ensure(1, model=MODEL, user_id="alice")

    assert await repo.rename(1, user_id="mallory", new_name="Hijacked") is None
    renamed = await repo.rename(1, user_id="alice", new_name="Trip planning")

    assert renamed.conversation_name == "Trip planning"
    assert await repo.rename(42, user_id="alice", new_name="Missing") is None


@pytest.mark.asyncio
async def test_delete_by_owner_counts_rows(session):
    repo = ConversationRepository(session)
    await repo.ensure(None, model=MODEL, user_id="alice")
    await repo.ensure(None, model=MODEL, user_id="alice")
    await repo.ensure(None, model=MODEL, user_id="bob")

    assert await repo.delete_by_owner("alice") == 2
    assert await repo.delete_by_owner("alice") == 0
    assert await repo.count(user_id="bob") == 1


@pytest.mark.asyncio
async def test_allocation_reuses_lowest_free_id_at_top_of_range(session):
    repo = ConversationRepository(session)
    await repo.ensure(MAX_CONVERSATION_ID, model=MODEL, user_id="alice")

    assert await repo.ensure(None, model=MODEL, user_id="bob") == 1
    assert await repo.ensure(None, model=MODEL, user_id="bob") == 2
    await repo.ensure(4, model=MODEL, user_id="bob")
    assert await repo.ensure(None, model=MODEL, user_id="bob") == 3
    assert await repo.ensure(None, model=MODEL, user_id="bob") == 5
