"""
Chat Message Database Model

Append-only conversation messages.

PRIVACY: content holds student text and must never be logged.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snet_triage.infrastructure.database.connection import Base


class ChatMessageModel(Base):
    """
    Table: chat_messages
    """

    __tablename__ = "chat_messages"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    chat_room_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("chat_rooms.id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        doc="student, staff or system/ai"
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    message_metadata: Mapped[Optional[dict]] = mapped_column(
        "metadata",
        JSONB,
        nullable=True,
        doc='e.g. {"type": "ai_triage", "kind": "question"}'
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
    )

    chat_room = relationship("ChatRoomModel", back_populates="messages")

    __table_args__ = (
        Index("ix_chat_messages_room_created", "chat_room_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ChatMessageModel(id={self.id}, sender_type='{self.sender_type}')>"
