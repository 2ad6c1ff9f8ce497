"""
Chat Repositories

Data access for chat rooms and messages, plus the store adapters
the triage engine consumes.
"""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from snet_triage.domain.enums.urgency import Sender
from snet_triage.domain.interfaces import ConversationStore, MessageStore
from snet_triage.domain.models.conversation import ConversationRecord, Message, utcnow
from snet_triage.infrastructure.database.connection import DatabaseManager
from snet_triage.infrastructure.database.models.chat_message_model import ChatMessageModel
from snet_triage.infrastructure.database.models.chat_room_model import ChatRoomModel
from snet_triage.infrastructure.database.repositories.base import BaseRepository


class ChatRoomRepository(BaseRepository[ChatRoomModel]):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ChatRoomModel, session)

    async def complete_triage(self, room_id: UUID, urgency_level: int, summary: str) -> bool:
        """
        Write urgency, summary and completion in a single UPDATE.

        Returns:
            True if a row was updated
        """
        result = await self._session.execute(
            update(ChatRoomModel)
            .where(ChatRoomModel.id == room_id)
            .values(
                urgency_level=urgency_level,
                ai_triage_summary=summary,
                ai_triage_complete=True,
            )
        )
        return result.rowcount > 0

    async def mark_first_reply(self, room_id: UUID) -> None:
        await self._session.execute(
            update(ChatRoomModel)
            .where(
                ChatRoomModel.id == room_id,
                ChatRoomModel.counselor_first_reply_at.is_(None),
            )
            .values(counselor_first_reply_at=utcnow())
        )


class ChatMessageRepository(BaseRepository[ChatMessageModel]):

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(ChatMessageModel, session)

    async def list_for_room(self, room_id: UUID) -> Sequence[ChatMessageModel]:
        """Messages of a room, oldest first."""
        result = await self._session.execute(
            select(ChatMessageModel)
            .where(ChatMessageModel.chat_room_id == room_id)
            .order_by(ChatMessageModel.created_at.asc(), ChatMessageModel.id.asc())
        )
        return result.scalars().all()


def _to_record(row: ChatRoomModel) -> ConversationRecord:
    return ConversationRecord(
        id=row.id,
        student_id=row.student_id,
        triage_complete=row.ai_triage_complete,
        first_staff_reply_at=row.counselor_first_reply_at,
        urgency_level=row.urgency_level,
        triage_summary=row.ai_triage_summary,
        created_at=row.created_at,
    )


def _to_message(row: ChatMessageModel) -> Message:
    return Message(
        id=row.id,
        conversation_id=row.chat_room_id,
        sender=Sender(row.sender_type),
        content=row.content,
        is_system=row.is_system,
        metadata=dict(row.message_metadata or {}),
        created_at=row.created_at,
    )


class SqlConversationStore(ConversationStore):
    """ConversationStore over chat_rooms; one transaction per call."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def create(self, record: ConversationRecord) -> ConversationRecord:
        async with self._db.session() as session:
            row = await ChatRoomRepository(session).create(
                ChatRoomModel(
                    id=record.id,
                    student_id=record.student_id,
                    ai_triage_complete=record.triage_complete,
                    urgency_level=record.urgency_level,
                    created_at=record.created_at,
                )
            )
            return _to_record(row)

    async def get(self, conversation_id: UUID) -> Optional[ConversationRecord]:
        async with self._db.session() as session:
            row = await ChatRoomRepository(session).get_by_id(conversation_id)
            return _to_record(row) if row is not None else None

    async def complete_triage(
        self,
        conversation_id: UUID,
        urgency_level: int,
        summary: str,
    ) -> None:
        async with self._db.session() as session:
            updated = await ChatRoomRepository(session).complete_triage(
                conversation_id, urgency_level, summary
            )
            if not updated:
                raise LookupError(f"Chat room {conversation_id} not found")

    async def mark_staff_reply(self, conversation_id: UUID) -> None:
        async with self._db.session() as session:
            await ChatRoomRepository(session).mark_first_reply(conversation_id)


class SqlMessageStore(MessageStore):
    """MessageStore over chat_messages."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def append(self, message: Message) -> Message:
        async with self._db.session() as session:
            await ChatMessageRepository(session).create(
                ChatMessageModel(
                    id=message.id,
                    chat_room_id=message.conversation_id,
                    sender_type=message.sender.value,
                    content=message.content,
                    is_system=message.is_system,
                    message_metadata=dict(message.metadata) or None,
                    created_at=message.created_at,
                )
            )
        return message

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        async with self._db.session() as session:
            rows = await ChatMessageRepository(session).list_for_room(conversation_id)
            return [_to_message(row) for row in rows]
