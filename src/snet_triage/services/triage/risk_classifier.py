"""
Risk Classifier

Produces a structured assessment from student-authored text through
a text-generation backend. One analysis primitive serves three call
sites, differing only in prompt construction:
- in-chat triage over the student's messages
- appointment pre-screening over a single free-text submission
- on-demand counselor display over a speaker-labelled transcript

SAFETY-CRITICAL: Never raises. Transport failure, timeout, content
filtering and malformed output all yield None; callers apply the
default urgency. No retries are performed.
"""

import asyncio
import time
from typing import Optional, Sequence

from snet_triage.config.logging_config import get_logger
from snet_triage.config.triage_script import TriageScript
from snet_triage.domain.interfaces import TriageClassifier
from snet_triage.domain.models.assessment import Assessment
from snet_triage.domain.models.conversation import Message
from snet_triage.infrastructure.llm.provider import LLMProvider
from snet_triage.infrastructure.metrics import track_classification, track_classifier_call
from snet_triage.services.prompt.prompt_builder import AssessmentPromptBuilder, BuiltPrompt
from snet_triage.services.triage.response_parser import parse_assessment

logger = get_logger(__name__)


class RiskClassifier(TriageClassifier):
    """
    Supervised risk classification with fail-safe defaults.

    Usage:
        classifier = RiskClassifier(provider, script)
        assessment = await classifier.classify(["Tôi buồn", ...])
        level = assessment.urgency_level if assessment else UrgencyLevel.NORMAL
    """

    DEFAULT_TIMEOUT_SECONDS = 20.0

    def __init__(
        self,
        provider: LLMProvider,
        script: Optional[TriageScript] = None,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_tokens: int = 1024,
        temperature: float = 0.3,
    ) -> None:
        self._provider = provider
        self._timeout = timeout_seconds
        self._prompts = AssessmentPromptBuilder(
            script or TriageScript(),
            max_tokens=max_tokens,
            temperature=temperature,
        )

    @property
    def provider(self) -> LLMProvider:
        return self._provider

    async def classify(self, history: Sequence[str]) -> Optional[Assessment]:
        """
        Classify an ordered sequence of student-authored texts.

        Args:
            history: Student message contents, oldest first

        Returns:
            Assessment, or None when unavailable
        """
        if not history:
            return None
        return await self._analyze(self._prompts.for_student_messages(history), source="chat")

    async def classify_appointment(self, issues_text: str) -> Optional[Assessment]:
        """Classify a single free-text appointment submission."""
        if not issues_text or not issues_text.strip():
            return None
        return await self._analyze(self._prompts.for_appointment(issues_text), source="appointment")

    async def assess_transcript(self, messages: Sequence[Message]) -> Optional[Assessment]:
        """Assess a full conversation for counselor display."""
        if not messages:
            return None
        return await self._analyze(self._prompts.for_transcript(messages), source="transcript")

    async def _analyze(self, prompt: BuiltPrompt, source: str) -> Optional[Assessment]:
        provider_name = self._provider.provider_name

        if not self._provider.is_configured():
            logger.warning("Classifier backend not configured", provider=provider_name)
            track_classification(source, "unavailable")
            return None

        start_time = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._provider.generate(prompt),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Classifier timeout - assessment unavailable",
                provider=provider_name,
                source=source,
                timeout=self._timeout,
            )
            track_classification(source, "unavailable")
            return None
        except Exception as e:
            logger.error(
                "Classifier error - assessment unavailable",
                provider=provider_name,
                source=source,
                error_type=type(e).__name__,
                error=str(e),
            )
            track_classification(source, "unavailable")
            return None

        track_classifier_call(provider_name, time.monotonic() - start_time, response.usage)

        try:
            assessment = parse_assessment(response.content)
        except Exception as e:
            logger.error(
                "Classifier output could not be parsed - assessment unavailable",
                provider=provider_name,
                source=source,
                error_type=type(e).__name__,
            )
            assessment = None

        if assessment is None:
            track_classification(source, "malformed")
            return None

        track_classification(source, "success")
        logger.info(
            "Assessment produced",
            provider=provider_name,
            source=source,
            urgency_level=int(assessment.urgency_level),
            suicide_risk=assessment.suicide_risk.value,
        )
        return assessment
