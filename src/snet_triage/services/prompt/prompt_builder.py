"""
Assessment Prompt Builder

Constructs deterministic classification prompts for the three call
sites that share one analysis primitive:
- in-chat triage (numbered student messages)
- appointment pre-screening (single free-text blob)
- counselor display (speaker-labelled transcript)

CLINICAL_REVIEW_REQUIRED: Instruction wording and level definitions
should be validated by the counseling team.
"""

from dataclasses import dataclass
from typing import Sequence

from snet_triage.config.triage_script import TriageScript
from snet_triage.domain.enums.urgency import Sender
from snet_triage.domain.models.conversation import Message


@dataclass(frozen=True)
class BuiltPrompt:
    """
    Complete prompt ready for a text-generation backend.

    Attributes:
        system_prompt: Instruction block describing the task
        user_message: Context block (the material to assess)
        max_tokens: Output length cap
        temperature: Sampling temperature
    """

    system_prompt: str
    user_message: str
    max_tokens: int = 1024
    temperature: float = 0.3

    def to_messages(self) -> list[dict]:
        """Convert to chat-completion message format."""
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_message},
        ]

    @property
    def full_prompt(self) -> str:
        """Single-text form for backends without a system role."""
        return f"{self.system_prompt}\n\n{self.user_message}"


URGENCY_SCALE = """Đánh giá mức độ khẩn cấp từ 0-3:
0 = Bình thường (tham vấn thông thường, không có dấu hiệu lo ngại)
1 = Cần chú ý (có một số khó khăn cần theo dõi)
2 = Khẩn cấp (cần hỗ trợ sớm, có dấu hiệu căng thẳng đáng kể)
3 = Rất khẩn cấp (cần can thiệp ngay, có dấu hiệu nguy hiểm hoặc tự làm hại)"""

OUTPUT_SHAPE = """Trả lời theo định dạng JSON:
{
  "urgencyLevel": <số từ 0-3>,
  "suicideRisk": "<none|low|medium|high>",
  "mainIssues": ["<vấn đề chính>"],
  "riskFactors": ["<yếu tố nguy cơ>"],
  "protectiveFactors": ["<yếu tố bảo vệ>"],
  "behavioralIndicators": ["<dấu hiệu hành vi>"],
  "emotionalState": "<trạng thái cảm xúc>",
  "recommendedApproach": "<hướng tiếp cận đề xuất>",
  "summary": "<tóm tắt ngắn gọn lý do>",
  "priorityNote": "<lưu ý cho tư vấn viên, chỉ khi mức độ từ 2 trở lên>"
}

Chỉ trả về JSON, không thêm text khác."""

SPEAKER_LABELS: dict[Sender, str] = {
    Sender.STUDENT: "Học sinh",
    Sender.STAFF: "Tư vấn viên",
    Sender.SYSTEM: "Trợ lý AI",
}


class AssessmentPromptBuilder:
    """
    Builds classification prompts from a triage script.

    Identical inputs always produce identical prompts.
    """

    def __init__(
        self,
        script: TriageScript,
        *,
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> None:
        self._script = script
        self._max_tokens = max_tokens
        self._temperature = temperature

    def _instruction(self, subject: str) -> str:
        return (
            f"{self._script.assessor_persona} Phân tích {subject} và đánh giá tình trạng tâm lý.\n\n"
            f"{URGENCY_SCALE}\n\n{OUTPUT_SHAPE}"
        )

    def _build(self, subject: str, context: str) -> BuiltPrompt:
        return BuiltPrompt(
            system_prompt=self._instruction(subject),
            user_message=context,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )

    def for_student_messages(self, messages: Sequence[str]) -> BuiltPrompt:
        """Prompt for in-chat triage over student-authored texts."""
        lines = [f'{i}. "{text}"' for i, text in enumerate(messages, start=1)]
        context = "Tin nhắn của học sinh:\n" + "\n".join(lines)
        return self._build("các tin nhắn sau từ một học sinh", context)

    def for_appointment(self, issues_text: str) -> BuiltPrompt:
        """Prompt for a single free-text booking submission."""
        context = f'Nội dung yêu cầu đặt lịch của học sinh:\n"{issues_text}"'
        return self._build("nội dung yêu cầu đặt lịch tư vấn sau", context)

    def for_transcript(self, messages: Sequence[Message]) -> BuiltPrompt:
        """Prompt over a speaker-labelled conversation transcript."""
        lines = [
            f"[{SPEAKER_LABELS.get(message.sender, message.sender.value)}]: {message.content}"
            for message in messages
        ]
        context = "Cuộc trò chuyện:\n" + "\n".join(lines)
        return self._build("cuộc trò chuyện tư vấn sau", context)
