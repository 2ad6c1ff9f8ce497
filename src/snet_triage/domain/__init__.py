"""
S-Net Domain Layer

Core entities, value objects and collaborator interfaces.
These models are independent of storage and transport.
"""

from snet_triage.domain.enums.urgency import Sender, StaffRole, SuicideRisk, UrgencyLevel
from snet_triage.domain.models.assessment import Assessment, EscalationEvent
from snet_triage.domain.models.conversation import ConversationRecord, Message
from snet_triage.domain.models.triage_state import TriagePhase, TriageState

__all__ = [
    "Sender",
    "StaffRole",
    "SuicideRisk",
    "UrgencyLevel",
    "Assessment",
    "EscalationEvent",
    "ConversationRecord",
    "Message",
    "TriagePhase",
    "TriageState",
]
