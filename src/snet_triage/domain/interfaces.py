"""
External Collaborator Interfaces

Contracts for the collaborators the triage engine depends on but
does not own: message and conversation storage, appointment storage,
the staff directory, the notification sink, and the risk classifier
capability.

ARCHITECTURE: Services depend only on these interfaces so storage
can be swapped (in-memory, PostgreSQL) and the classifier can be
replaced by a deterministic fake in tests.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence
from uuid import UUID

from snet_triage.domain.models.appointment import Appointment, Notification, StaffMember
from snet_triage.domain.models.assessment import Assessment
from snet_triage.domain.models.conversation import ConversationRecord, Message


class MessageStore(ABC):
    """Append-only message storage."""

    @abstractmethod
    async def append(self, message: Message) -> Message:
        """Append a message to its conversation."""
        pass

    @abstractmethod
    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        """Full history ordered by created_at ascending."""
        pass


class ConversationStore(ABC):
    """Conversation/session record storage."""

    @abstractmethod
    async def create(self, record: ConversationRecord) -> ConversationRecord:
        pass

    @abstractmethod
    async def get(self, conversation_id: UUID) -> Optional[ConversationRecord]:
        pass

    @abstractmethod
    async def complete_triage(
        self,
        conversation_id: UUID,
        urgency_level: int,
        summary: str,
    ) -> None:
        """
        Write urgency_level, summary and triage_complete as one unit.

        Raises:
            Exception: Any storage failure; nothing is written in that case.
        """
        pass

    @abstractmethod
    async def mark_staff_reply(self, conversation_id: UUID) -> None:
        """Record the first staff reply timestamp if not already set."""
        pass


class AppointmentStore(ABC):
    """Appointment request storage."""

    @abstractmethod
    async def create(self, appointment: Appointment) -> Appointment:
        pass


class StaffDirectory(ABC):
    """Role-based user lookup."""

    @abstractmethod
    async def list_users_by_role(self, roles: Sequence[str]) -> list[StaffMember]:
        pass


class NotificationSink(ABC):
    """Per-recipient notification delivery."""

    @abstractmethod
    async def notify(self, notification: Notification) -> None:
        """
        Write one notification.

        Raises:
            Exception: When the write for this recipient fails.
        """
        pass


class TriageClassifier(ABC):
    """
    Risk classification capability.

    Implementations never raise: any failure is reported as None.
    """

    @abstractmethod
    async def classify(self, history: Sequence[str]) -> Optional[Assessment]:
        """Classify an ordered sequence of student-authored texts."""
        pass
