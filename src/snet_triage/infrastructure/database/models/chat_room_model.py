"""
Chat Room Database Model

One row per conversation. Holds the triage fields the engine reads
and the urgency/completion pair it writes in one transaction.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, SmallInteger, Text, func
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from snet_triage.infrastructure.database.connection import Base


class ChatRoomModel(Base):
    """
    Conversation record.

    Table: chat_rooms
    """

    __tablename__ = "chat_rooms"

    id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    student_id: Mapped[Optional[UUID]] = mapped_column(
        PGUUID(as_uuid=True),
        nullable=True,
        index=True,
        doc="Owning student (anonymous id)"
    )

    # Triage
    ai_triage_complete: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    urgency_level: Mapped[Optional[int]] = mapped_column(
        SmallInteger,
        nullable=True,
        index=True,
        doc="0=normal, 1=attention, 2=urgent, 3=critical"
    )
    ai_triage_summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    counselor_first_reply_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        doc="Set once; halts automated triage"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=func.now(),
        nullable=False,
    )

    messages = relationship(
        "ChatMessageModel",
        back_populates="chat_room",
        lazy="noload",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ChatRoomModel(id={self.id}, urgency_level={self.urgency_level})>"
