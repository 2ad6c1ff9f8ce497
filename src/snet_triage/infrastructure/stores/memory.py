"""
In-Memory Storage Adapters

Process-local implementations of the collaborator interfaces, used
in development (SNET_STORAGE_BACKEND=memory) and tests. Each adapter
can be told to fail so error paths are exercisable.
"""

import asyncio
from collections import defaultdict
from dataclasses import replace
from typing import Optional, Sequence
from uuid import UUID

from snet_triage.domain.interfaces import (
    AppointmentStore,
    ConversationStore,
    MessageStore,
    NotificationSink,
    StaffDirectory,
)
from snet_triage.domain.models.appointment import Appointment, Notification, StaffMember
from snet_triage.domain.models.conversation import ConversationRecord, Message, utcnow


class InMemoryMessageStore(MessageStore):
    """Append-only message log per conversation."""

    def __init__(self) -> None:
        self._messages: dict[UUID, list[Message]] = defaultdict(list)

    async def append(self, message: Message) -> Message:
        self._messages[message.conversation_id].append(message)
        return message

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        # Stable sort keeps append order for identical timestamps
        return sorted(self._messages.get(conversation_id, []), key=lambda m: m.created_at)


class InMemoryConversationStore(ConversationStore):
    """
    Conversation records keyed by id.

    Set fail_completion to make complete_triage raise without
    writing anything.
    """

    def __init__(self) -> None:
        self._records: dict[UUID, ConversationRecord] = {}
        self._lock = asyncio.Lock()
        self.fail_completion: Optional[Exception] = None

    async def create(self, record: ConversationRecord) -> ConversationRecord:
        self._records[record.id] = record
        return record

    async def get(self, conversation_id: UUID) -> Optional[ConversationRecord]:
        record = self._records.get(conversation_id)
        return replace(record) if record is not None else None

    async def complete_triage(
        self,
        conversation_id: UUID,
        urgency_level: int,
        summary: str,
    ) -> None:
        async with self._lock:
            if self.fail_completion is not None:
                raise self.fail_completion
            record = self._records.get(conversation_id)
            if record is None:
                raise KeyError(f"Unknown conversation {conversation_id}")
            self._records[conversation_id] = replace(
                record,
                urgency_level=urgency_level,
                triage_summary=summary,
                triage_complete=True,
            )

    async def mark_staff_reply(self, conversation_id: UUID) -> None:
        async with self._lock:
            record = self._records.get(conversation_id)
            if record is None or record.first_staff_reply_at is not None:
                return
            self._records[conversation_id] = replace(record, first_staff_reply_at=utcnow())


class InMemoryAppointmentStore(AppointmentStore):

    def __init__(self) -> None:
        self.appointments: dict[UUID, Appointment] = {}

    async def create(self, appointment: Appointment) -> Appointment:
        self.appointments[appointment.id] = appointment
        return appointment


class InMemoryStaffDirectory(StaffDirectory):
    """Static staff list; set fail_lookup to simulate an outage."""

    def __init__(self, staff: Sequence[StaffMember] = ()) -> None:
        self._staff = list(staff)
        self.fail_lookup: Optional[Exception] = None

    def add(self, member: StaffMember) -> None:
        self._staff.append(member)

    async def list_users_by_role(self, roles: Sequence[str]) -> list[StaffMember]:
        if self.fail_lookup is not None:
            raise self.fail_lookup
        wanted = set(roles)
        return [member for member in self._staff if member.role in wanted]


class InMemoryNotificationSink(NotificationSink):
    """
    Records delivered notifications.

    Recipients listed in failing_recipients raise on delivery.
    """

    def __init__(self) -> None:
        self.sent: list[Notification] = []
        self.failing_recipients: set[UUID] = set()

    async def notify(self, notification: Notification) -> None:
        if notification.recipient_id in self.failing_recipients:
            raise ConnectionError(f"Delivery to {notification.recipient_id} failed")
        self.sent.append(notification)
