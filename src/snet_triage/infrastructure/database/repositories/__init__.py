"""
Repository pattern implementations package.
"""

from snet_triage.infrastructure.database.repositories.base import BaseRepository
from snet_triage.infrastructure.database.repositories.chat_repository import (
    ChatMessageRepository,
    ChatRoomRepository,
    SqlConversationStore,
    SqlMessageStore,
)
from snet_triage.infrastructure.database.repositories.staff_repository import (
    SqlAppointmentStore,
    SqlNotificationSink,
    SqlStaffDirectory,
    UserRepository,
)

__all__ = [
    "BaseRepository",
    "ChatMessageRepository",
    "ChatRoomRepository",
    "SqlConversationStore",
    "SqlMessageStore",
    "SqlAppointmentStore",
    "SqlNotificationSink",
    "SqlStaffDirectory",
    "UserRepository",
]
