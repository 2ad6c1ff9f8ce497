"""
Assessment Models

Structured risk assessment extracted from free-text conversation,
and the escalation event produced when a stored urgency level
crosses the escalation threshold.

SAFETY-CRITICAL: Only urgency_level and summary are persisted.
The remaining fields are recomputed on demand for counselor display.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from snet_triage.domain.enums.urgency import SuicideRisk, UrgencyLevel


@dataclass(frozen=True)
class Assessment:
    """
    Validated, bounded risk assessment.

    Attributes:
        urgency_level: Ordinal urgency, always within 0-3
        suicide_risk: Categorical self-harm risk
        main_issues: Short descriptions of the presenting issues
        risk_factors: Observed risk factors
        protective_factors: Observed protective factors
        behavioral_indicators: Observed behavioral signs
        emotional_state: Short description of the emotional state
        recommended_approach: Suggested counseling approach
        summary: Short overall summary / reasoning
        priority_note: Note for counselors, only when urgency is elevated
    """

    urgency_level: UrgencyLevel = UrgencyLevel.NORMAL
    suicide_risk: SuicideRisk = SuicideRisk.NONE
    main_issues: tuple[str, ...] = ()
    risk_factors: tuple[str, ...] = ()
    protective_factors: tuple[str, ...] = ()
    behavioral_indicators: tuple[str, ...] = ()
    emotional_state: str = ""
    recommended_approach: str = ""
    summary: str = ""
    priority_note: str = ""

    @property
    def is_high_risk(self) -> bool:
        """High risk when urgent/critical or suicide risk is medium/high."""
        return (
            self.urgency_level >= UrgencyLevel.URGENT
            or self.suicide_risk in (SuicideRisk.MEDIUM, SuicideRisk.HIGH)
        )

    def to_dict(self) -> dict:
        """Serialize using the camelCase keys counselor views expect."""
        return {
            "urgencyLevel": int(self.urgency_level),
            "urgencyLabel": self.urgency_level.label,
            "suicideRisk": self.suicide_risk.value,
            "suicideRiskLabel": self.suicide_risk.label,
            "mainIssues": list(self.main_issues),
            "riskFactors": list(self.risk_factors),
            "protectiveFactors": list(self.protective_factors),
            "behavioralIndicators": list(self.behavioral_indicators),
            "emotionalState": self.emotional_state,
            "recommendedApproach": self.recommended_approach,
            "summary": self.summary,
            "priorityNote": self.priority_note,
            "isHighRisk": self.is_high_risk,
        }


@dataclass(frozen=True)
class EscalationEvent:
    """
    Ephemeral escalation signal.

    Generated when the triage engine stores an urgency level at or
    above the escalation threshold; consumed once by the dispatcher.
    """

    conversation_id: UUID
    urgency_level: UrgencyLevel
    reasoning: str = ""
    student_id: Optional[UUID] = None

    @property
    def is_critical(self) -> bool:
        return self.urgency_level >= UrgencyLevel.CRITICAL


@dataclass
class TriageOutcome:
    """
    Result of a completed triage analysis.

    Attributes:
        urgency_level: Level persisted on the conversation record
        assessment: Parsed assessment, None when unavailable
        escalation: Escalation event when the threshold was crossed
    """

    urgency_level: UrgencyLevel
    assessment: Optional[Assessment] = None
    escalation: Optional[EscalationEvent] = None

    @property
    def assessment_available(self) -> bool:
        return self.assessment is not None
