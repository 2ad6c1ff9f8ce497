"""
Conversation Domain Models

A conversation is the ordered, append-only message history of one
chat session, plus the session record the triage engine reads and
writes (completion flag, first staff reply, urgency level).

PRIVACY: Message content is sensitive and must never be logged.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from snet_triage.domain.enums.urgency import Sender, UrgencyLevel


AI_TRIAGE_TYPE = "ai_triage"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageKind:
    """Values of metadata["kind"] on automated triage messages."""

    WELCOME = "welcome"
    QUESTION = "question"
    CLOSING = "closing"
    ESCALATION = "escalation"


@dataclass(frozen=True)
class Message:
    """
    A single message in a conversation.

    Messages are never edited once appended.

    Attributes:
        conversation_id: Owning conversation
        sender: Author (student, staff, system/ai)
        content: Message text
        is_system: True for automated messages
        metadata: Opaque tag, e.g. {"type": "ai_triage"}
        created_at: Append timestamp
        id: Unique message identifier
    """

    conversation_id: UUID
    sender: Sender
    content: str
    is_system: bool = False
    metadata: dict = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    id: UUID = field(default_factory=uuid4)

    @classmethod
    def triage(cls, conversation_id: UUID, content: str, kind: str) -> "Message":
        """Build an automated triage message."""
        return cls(
            conversation_id=conversation_id,
            sender=Sender.SYSTEM,
            content=content,
            is_system=True,
            metadata={"type": AI_TRIAGE_TYPE, "kind": kind},
        )

    @property
    def triage_kind(self) -> Optional[str]:
        if not is_ai_message(self):
            return None
        return self.metadata.get("kind")

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "conversation_id": str(self.conversation_id),
            "sender": self.sender.value,
            "content": self.content,
            "is_system": self.is_system,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class ConversationRecord:
    """
    Session record of one conversation.

    The triage engine reads all three triage fields and writes
    urgency_level together with triage_complete as a unit.
    """

    id: UUID = field(default_factory=uuid4)
    student_id: Optional[UUID] = None
    triage_complete: bool = False
    first_staff_reply_at: Optional[datetime] = None
    urgency_level: Optional[int] = None
    triage_summary: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def urgency(self) -> Optional[UrgencyLevel]:
        if self.urgency_level is None:
            return None
        return UrgencyLevel.coerce(self.urgency_level)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "student_id": str(self.student_id) if self.student_id else None,
            "triage_complete": self.triage_complete,
            "first_staff_reply_at": (
                self.first_staff_reply_at.isoformat() if self.first_staff_reply_at else None
            ),
            "urgency_level": self.urgency_level,
            "triage_summary": self.triage_summary,
        }


def is_ai_message(message: Message) -> bool:
    """Check whether a message was emitted by the automated triage."""
    return message.is_system and message.metadata.get("type") == AI_TRIAGE_TYPE


def should_ai_respond(record: ConversationRecord) -> bool:
    """
    Check whether automated triage may still act on a conversation.

    The assistant stops once a counselor has replied or triage
    has already completed.
    """
    if record.first_staff_reply_at is not None:
        return False
    if record.triage_complete:
        return False
    return True
