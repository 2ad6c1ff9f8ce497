"""
Appointment Request Models

Single free-text booking submissions. Guests may book without an
account, in which case student_id is None.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Optional
from uuid import UUID, uuid4

from snet_triage.domain.enums.urgency import UrgencyLevel
from snet_triage.domain.models.conversation import utcnow


class AppointmentStatus(StrEnum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


OTHER_TIME_SLOT = "other"

TIME_SLOTS: dict[str, str] = {
    "monday_11": "Thứ 2, 11h00 - 12h00",
    "tuesday_11": "Thứ 3, 11h00 - 12h00",
    "wednesday_11": "Thứ 4, 11h00 - 12h00",
    "thursday_11": "Thứ 5, 11h00 - 12h00",
    "friday_11": "Thứ 6, 11h00 - 12h00",
    OTHER_TIME_SLOT: "Khác (tự điền)",
}


@dataclass(frozen=True)
class AppointmentRequest:
    """Booking form submission."""

    full_name: str
    email: str
    time_slot: str
    issues: str
    class_name: Optional[str] = None
    dorm_room: Optional[str] = None
    custom_time_slot: Optional[str] = None
    student_id: Optional[UUID] = None

    @property
    def time_slot_display(self) -> str:
        """Human-readable slot, falling back to the raw value."""
        if self.time_slot == OTHER_TIME_SLOT:
            return self.custom_time_slot or "Khác"
        return TIME_SLOTS.get(self.time_slot, self.time_slot)

    @property
    def stored_time_slot(self) -> str:
        if self.time_slot == OTHER_TIME_SLOT:
            return f"{OTHER_TIME_SLOT}:{self.custom_time_slot or ''}"
        return self.time_slot


@dataclass
class Appointment:
    """Persisted appointment request."""

    full_name: str
    email: str
    time_slot: str
    time_slot_display: str
    issues: str
    urgency_level: UrgencyLevel = UrgencyLevel.NORMAL
    ai_analysis: str = ""
    status: AppointmentStatus = AppointmentStatus.PENDING
    class_name: Optional[str] = None
    dorm_room: Optional[str] = None
    student_id: Optional[UUID] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    @classmethod
    def from_request(
        cls,
        request: AppointmentRequest,
        urgency_level: UrgencyLevel,
        ai_analysis: str,
    ) -> "Appointment":
        return cls(
            full_name=request.full_name,
            email=request.email,
            time_slot=request.stored_time_slot,
            time_slot_display=request.time_slot_display,
            issues=request.issues,
            urgency_level=urgency_level,
            ai_analysis=ai_analysis,
            class_name=request.class_name or None,
            dorm_room=request.dorm_room or None,
            student_id=request.student_id,
        )

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "full_name": self.full_name,
            "time_slot": self.time_slot,
            "time_slot_display": self.time_slot_display,
            "urgency_level": int(self.urgency_level),
            "ai_analysis": self.ai_analysis,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class StaffMember:
    """Entry returned by the staff directory."""

    id: UUID
    role: str = "counselor"
    full_name: str = ""


@dataclass(frozen=True)
class Notification:
    """A single notification written to the notification sink."""

    recipient_id: UUID
    category: str
    title: str
    body: str
    link: Optional[str] = None
    payload: dict = field(default_factory=dict)
