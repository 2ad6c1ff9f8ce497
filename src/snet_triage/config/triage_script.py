"""
Triage Script Configuration

Immutable configuration for the automated triage conversation:
the fixed texts the assistant sends, the ordered scripted questions,
the assessor persona used to build classification prompts, and the
pacing delays between automated messages.

CLINICAL_REVIEW_REQUIRED: Wording of all student-facing texts.
"""

from dataclasses import dataclass
from typing import Optional

from snet_triage.config.settings import Settings, get_settings


DEFAULT_WELCOME_MESSAGE = (
    "Xin chào! 👋 Mình là trợ lý ảo của S-Net. Trong khi chờ tư vấn viên, "
    "mình muốn hỏi bạn một vài câu để hiểu rõ hơn về tình trạng của bạn."
)

DEFAULT_QUESTIONS = (
    "Bạn có chuyện gì cần tư vấn hôm nay không? 💭",
    "Bạn đang cảm thấy như thế nào? 🤗",
)

DEFAULT_CLOSING_MESSAGE = (
    "Cảm ơn bạn đã chia sẻ. Tư vấn viên sẽ sớm liên hệ với bạn. "
    "Trong lúc chờ đợi, hãy nhớ rằng bạn không đơn độc nhé! ❤️"
)

DEFAULT_ESCALATION_TEMPLATE = (
    "⚠️ Dựa trên những gì bạn chia sẻ, mình đã đánh dấu cuộc trò chuyện này "
    "là {severity} để tư vấn viên ưu tiên hỗ trợ bạn."
)

DEFAULT_ASSESSOR_PERSONA = "Bạn là chuyên gia tâm lý học đường."


@dataclass(frozen=True)
class TriageScript:
    """
    Fixed texts and scripted questions for one triage deployment.

    Attributes:
        welcome_message: First automated message of a conversation
        questions: Ordered scripted follow-up questions
        closing_message: Sent once classification has finished
        escalation_template: Notice text, formatted with {severity}
        urgent_wording: Severity wording for urgency level 2
        critical_wording: Severity wording for urgency level 3
        assessor_persona: Opening line of every classification prompt
    """

    welcome_message: str = DEFAULT_WELCOME_MESSAGE
    questions: tuple[str, ...] = DEFAULT_QUESTIONS
    closing_message: str = DEFAULT_CLOSING_MESSAGE
    escalation_template: str = DEFAULT_ESCALATION_TEMPLATE
    urgent_wording: str = "khẩn cấp"
    critical_wording: str = "rất khẩn cấp"
    assessor_persona: str = DEFAULT_ASSESSOR_PERSONA

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def question_at(self, index: int) -> Optional[str]:
        """Get the scripted question at index, or None past the end."""
        if 0 <= index < len(self.questions):
            return self.questions[index]
        return None

    def escalation_notice(self, critical: bool) -> str:
        """Render the in-conversation escalation notice."""
        severity = self.critical_wording if critical else self.urgent_wording
        return self.escalation_template.format(severity=severity)


@dataclass(frozen=True)
class TriagePacing:
    """
    Delays between automated messages, in seconds.

    Delays keep consecutive automated messages from rendering as one
    block. They are scheduled, never awaited by the caller.
    """

    first_question_delay: float = 1.5
    next_question_delay: float = 1.0
    escalation_delay: float = 1.5

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "TriagePacing":
        settings = settings or get_settings()
        return cls(
            first_question_delay=settings.triage.first_question_delay_seconds,
            next_question_delay=settings.triage.next_question_delay_seconds,
            escalation_delay=settings.triage.escalation_delay_seconds,
        )

    @classmethod
    def immediate(cls) -> "TriagePacing":
        """Zero delays (tests and batch replays)."""
        return cls(0.0, 0.0, 0.0)
