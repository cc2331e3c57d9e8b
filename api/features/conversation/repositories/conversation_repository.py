"""Conversation repository: the conversation store."""
from typing import List, Optional

import structlog
from sqlalchemy import exists, func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from api.features.conversation.entities.conversation import (
    DEFAULT_CONVERSATION_NAME,
    MAX_CONVERSATION_ID,
    Conversation,
)
from api.shared.base import BaseRepository
from api.shared.exceptions import StorageError

logger = structlog.get_logger("bloom.conversation.repository")

MAX_ALLOCATION_ATTEMPTS = 5


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversation entities."""

    model = Conversation

    async def get_most_recent_id(self) -> int:
        """Highest conversation id stored, or 0 when the table is empty."""
        result = await self.session.execute(select(func.max(Conversation.id)))
        return int(result.scalar() or 0)

    async def ensure(
        self, conversation_id: Optional[int], *, model: str, user_id: str
    ) -> int:
        """Make sure a conversation row exists and return its id.

        An existing row is left untouched. A missing row is inserted with the
        default name. Without an id, the next id is allocated as
        ``max(id) + 1`` and retried when a concurrent insert takes it first.
        When a caller-chosen id occupies the top of the INTEGER range, the
        lowest unused id is allocated instead.
        """
        if conversation_id is not None:
            if await self.exists(conversation_id):
                return conversation_id
            # A concurrent request may have created it since the check above
            await self._try_insert(conversation_id, model=model, user_id=user_id)
            return conversation_id

        for attempt in range(1, MAX_ALLOCATION_ATTEMPTS + 1):
            candidate = await self._next_candidate_id()
            if candidate > MAX_CONVERSATION_ID:
                raise StorageError(
                    "Conversation id range exhausted", {"max_id": MAX_CONVERSATION_ID}
                )
            if await self._try_insert(candidate, model=model, user_id=user_id):
                return candidate
            logger.info("conversation_id_collision", candidate=candidate, attempt=attempt)

        raise StorageError(
            "Could not allocate a conversation id",
            {"attempts": MAX_ALLOCATION_ATTEMPTS},
        )

    async def _next_candidate_id(self) -> int:
        """``max(id) + 1``, or the lowest free id once the top of the range is taken."""
        candidate = await self.get_most_recent_id() + 1
        if candidate <= MAX_CONVERSATION_ID:
            return candidate
        if not await self.exists(1):
            return 1
        successor = aliased(Conversation)
        stmt = select(func.min(Conversation.id + 1)).where(
            ~exists().where(successor.id == Conversation.id + 1)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar())

    async def _try_insert(self, conversation_id: int, *, model: str, user_id: str) -> bool:
        """INSERT ... ON CONFLICT (id) DO NOTHING; False when the id is already taken."""
        values = {
            "id": conversation_id,
            "model": model,
            "user_id": user_id,
            "conversation_name": DEFAULT_CONVERSATION_NAME,
        }
        dialect = self.session.bind.dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(Conversation).values(**values).on_conflict_do_nothing(
                index_elements=[Conversation.id]
            )
        elif dialect == "sqlite":
            stmt = sqlite_insert(Conversation).values(**values).on_conflict_do_nothing(
                index_elements=[Conversation.id]
            )
        else:
            stmt = insert(Conversation).values(**values)

        try:
            result = await self.session.execute(stmt.returning(Conversation.id))
        except IntegrityError:
            # Only reachable on dialects without ON CONFLICT support
            return False
        if result.scalar_one_or_none() is None:
            return False
        logger.info("conversation_created", conversation_id=conversation_id, user_id=user_id)
        return True

    async def list_by_owner(self, user_id: str) -> List[Conversation]:
        """Conversations owned by ``user_id``, newest first."""
        stmt = (
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def rename(
        self, conversation_id: int, *, user_id: str, new_name: str
    ) -> Optional[Conversation]:
        """Rename when the owner matches; None when no such row exists for the owner."""
        stmt = select(Conversation).where(
            Conversation.id == conversation_id,
            Conversation.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        entity = result.scalar_one_or_none()
        if entity is None:
            return None
        entity.conversation_name = new_name
        await self.session.flush()
        return entity

    async def set_name(self, conversation_id: int, new_name: str) -> None:
        """Overwrite the name regardless of owner (used by auto-naming)."""
        entity = await self.get_by_id(conversation_id)
        if entity is not None:
            entity.conversation_name = new_name
            await self.session.flush()

    async def delete_by_owner(self, user_id: str) -> int:
        return await self.delete_by_field("user_id", user_id)
