"""Domain models package."""

from snet_triage.domain.models.appointment import (
    Appointment,
    AppointmentRequest,
    AppointmentStatus,
    Notification,
    StaffMember,
    TIME_SLOTS,
)
from snet_triage.domain.models.assessment import Assessment, EscalationEvent, TriageOutcome
from snet_triage.domain.models.conversation import (
    ConversationRecord,
    Message,
    MessageKind,
    is_ai_message,
    should_ai_respond,
)
from snet_triage.domain.models.triage_state import TriagePhase, TriageState

__all__ = [
    # Conversation
    "ConversationRecord",
    "Message",
    "MessageKind",
    "is_ai_message",
    "should_ai_respond",
    # Assessment
    "Assessment",
    "EscalationEvent",
    "TriageOutcome",
    # Triage state
    "TriagePhase",
    "TriageState",
    # Appointments
    "Appointment",
    "AppointmentRequest",
    "AppointmentStatus",
    "Notification",
    "StaffMember",
    "TIME_SLOTS",
]
