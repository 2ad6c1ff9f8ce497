"""
Triage State Model

Per-conversation state of the automated triage conversation.
Owned and mutated exclusively by the triage state machine.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from snet_triage.domain.enums.urgency import UrgencyLevel
from snet_triage.domain.models.assessment import TriageOutcome


class TriagePhase(StrEnum):
    """
    Triage lifecycle phases.

    COMPLETE and HALTED are terminal: no automated state change
    or message follows either of them.
    """

    NOT_STARTED = "not_started"
    WELCOMED = "welcomed"
    QUESTIONING = "questioning"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    HALTED = "halted"


@dataclass
class TriageState:
    """
    Mutable triage state of one conversation.

    Attributes:
        phase: Current lifecycle phase
        question_index: Number of scripted questions already sent;
            the next question to send is questions[question_index]
        urgency_level: Stored urgency, unset until triage completes
        question_pending: A scripted question is scheduled but not yet sent
        outcome: Result of the analysis once complete
    """

    phase: TriagePhase = TriagePhase.NOT_STARTED
    question_index: int = 0
    urgency_level: Optional[UrgencyLevel] = None
    question_pending: bool = False
    outcome: Optional[TriageOutcome] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in (TriagePhase.COMPLETE, TriagePhase.HALTED)

    @property
    def is_halted(self) -> bool:
        return self.phase == TriagePhase.HALTED

    def halt(self) -> None:
        """Irreversibly stop automated triage."""
        self.phase = TriagePhase.HALTED
        self.question_pending = False

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "question_index": self.question_index,
            "urgency_level": int(self.urgency_level) if self.urgency_level is not None else None,
            "question_pending": self.question_pending,
            "assessment_available": (
                self.outcome.assessment_available if self.outcome else False
            ),
        }
