"""
Database ORM models package.
"""

from snet_triage.infrastructure.database.models.appointment_model import AppointmentRequestModel
from snet_triage.infrastructure.database.models.chat_message_model import ChatMessageModel
from snet_triage.infrastructure.database.models.chat_room_model import ChatRoomModel
from snet_triage.infrastructure.database.models.notification_model import (
    NotificationModel,
    UserModel,
)

__all__ = [
    "AppointmentRequestModel",
    "ChatMessageModel",
    "ChatRoomModel",
    "NotificationModel",
    "UserModel",
]
