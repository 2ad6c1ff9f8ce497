"""In-process storage adapters."""

from snet_triage.infrastructure.stores.memory import (
    InMemoryAppointmentStore,
    InMemoryConversationStore,
    InMemoryMessageStore,
    InMemoryNotificationSink,
    InMemoryStaffDirectory,
)

__all__ = [
    "InMemoryAppointmentStore",
    "InMemoryConversationStore",
    "InMemoryMessageStore",
    "InMemoryNotificationSink",
    "InMemoryStaffDirectory",
]
