"""Message repository: the append-only message store."""
from typing import List

from sqlalchemy import delete, select

from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message
from api.shared.base import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for message entities."""

    model = Message

    async def append(
        self, conversation_id: int, *, role: str, content: str, timestamp: float
    ) -> Message:
        """Insert one message row."""
        return await self.create(
            Message(
                conversation_id=conversation_id,
                role=role,
                content=content,
                timestamp=timestamp,
            )
        )

    async def list_by_conversation(self, conversation_id: int) -> List[Message]:
        """Messages of one conversation in ascending timestamp order."""
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.timestamp.asc(), Message.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_by_conversation(self, conversation_id: int) -> int:
        return await self.delete_by_field("conversation_id", conversation_id)

    async def delete_by_owner(self, user_id: str) -> int:
        """Delete every message belonging to the owner's conversations."""
        owned = select(Conversation.id).where(Conversation.user_id == user_id)
        stmt = (
            delete(Message)
            .where(Message.conversation_id.in_(owned))
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
