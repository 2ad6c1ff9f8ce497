"""Tests configuration and fixtures."""

import asyncio
from typing import Optional, Sequence
from uuid import UUID, uuid4

import pytest

from snet_triage.config import Settings, TriagePacing, TriageScript
from snet_triage.domain.enums.urgency import Sender, StaffRole, SuicideRisk, UrgencyLevel
from snet_triage.domain.interfaces import TriageClassifier
from snet_triage.domain.models.appointment import StaffMember
from snet_triage.domain.models.assessment import Assessment
from snet_triage.domain.models.conversation import ConversationRecord, Message
from snet_triage.infrastructure.llm.provider import LLMProvider, LLMResponse
from snet_triage.infrastructure.stores import (
    InMemoryAppointmentStore,
    InMemoryConversationStore,
    InMemoryMessageStore,
    InMemoryNotificationSink,
    InMemoryStaffDirectory,
)
from snet_triage.services.escalation import EscalationDispatcher
from snet_triage.services.prompt.prompt_builder import BuiltPrompt
from snet_triage.services.triage.scheduler import DelayedTaskScheduler
from snet_triage.services.triage.state_machine import TriageStateMachine


class FakeProvider(LLMProvider):
    """Text-generation backend returning canned output."""

    def __init__(
        self,
        content: str = '{"urgencyLevel": 0, "summary": "ok"}',
        error: Optional[Exception] = None,
        delay: float = 0.0,
        configured: bool = True,
    ) -> None:
        self.content = content
        self.error = error
        self.delay = delay
        self.configured = configured
        self.prompts: list[BuiltPrompt] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def default_model(self) -> str:
        return "fake-model"

    async def generate(self, prompt, *, model=None, max_tokens=None, temperature=None) -> LLMResponse:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return LLMResponse(
            content=self.content,
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
            provider="fake",
        )

    async def health_check(self) -> bool:
        return self.configured

    def is_configured(self) -> bool:
        return self.configured


class ScriptedClassifier(TriageClassifier):
    """
    Deterministic classifier.

    Returns a fixed assessment (or None) and records every history it
    was asked to classify. When gate is set, classification blocks
    until the gate is released.
    """

    def __init__(self, urgency: Optional[int] = 0, summary: str = "tóm tắt") -> None:
        self.urgency = urgency
        self.summary = summary
        self.calls: list[list[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.gate: Optional[asyncio.Event] = None
        self.error: Optional[Exception] = None

    async def classify(self, history: Sequence[str]) -> Optional[Assessment]:
        self.calls.append(list(history))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.error is not None:
                raise self.error
            if self.urgency is None:
                return None
            level = UrgencyLevel.coerce(self.urgency)
            return Assessment(
                urgency_level=level,
                suicide_risk=SuicideRisk.HIGH if level == UrgencyLevel.CRITICAL else SuicideRisk.NONE,
                summary=self.summary,
            )
        finally:
            self.in_flight -= 1


@pytest.fixture
def test_settings() -> Settings:
    """Settings with development defaults and in-memory storage."""
    return Settings(
        env="development",
        debug=True,
        storage_backend="memory",
    )


@pytest.fixture
def script() -> TriageScript:
    return TriageScript(questions=("Câu hỏi 1?", "Câu hỏi 2?"))


@pytest.fixture
def pacing() -> TriagePacing:
    return TriagePacing.immediate()


@pytest.fixture
def scheduler() -> DelayedTaskScheduler:
    return DelayedTaskScheduler()


@pytest.fixture
def message_store() -> InMemoryMessageStore:
    return InMemoryMessageStore()


@pytest.fixture
def conversation_store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def appointment_store() -> InMemoryAppointmentStore:
    return InMemoryAppointmentStore()


@pytest.fixture
def counselors() -> list[StaffMember]:
    return [
        StaffMember(id=uuid4(), role=StaffRole.COUNSELOR.value, full_name="Cô Lan"),
        StaffMember(id=uuid4(), role=StaffRole.COUNSELOR.value, full_name="Thầy Minh"),
    ]


@pytest.fixture
def admins() -> list[StaffMember]:
    return [StaffMember(id=uuid4(), role=StaffRole.ADMIN.value, full_name="Admin")]


@pytest.fixture
def staff_directory(counselors, admins) -> InMemoryStaffDirectory:
    students = [StaffMember(id=uuid4(), role="student")]
    return InMemoryStaffDirectory([*counselors, *admins, *students])


@pytest.fixture
def notification_sink() -> InMemoryNotificationSink:
    return InMemoryNotificationSink()


@pytest.fixture
def classifier() -> ScriptedClassifier:
    return ScriptedClassifier()


@pytest.fixture
def dispatcher(
    message_store,
    staff_directory,
    notification_sink,
    scheduler,
    script,
    pacing,
) -> EscalationDispatcher:
    return EscalationDispatcher(
        message_store,
        staff_directory,
        notification_sink,
        scheduler,
        script=script,
        pacing=pacing,
    )


@pytest.fixture
def machine(
    message_store,
    conversation_store,
    classifier,
    dispatcher,
    script,
    pacing,
    scheduler,
) -> TriageStateMachine:
    return TriageStateMachine(
        message_store,
        conversation_store,
        classifier,
        dispatcher,
        script=script,
        pacing=pacing,
        scheduler=scheduler,
    )


@pytest.fixture
async def conversation(conversation_store) -> ConversationRecord:
    return await conversation_store.create(ConversationRecord(student_id=uuid4()))


def student_message(conversation_id: UUID, content: str) -> Message:
    return Message(conversation_id=conversation_id, sender=Sender.STUDENT, content=content)


def staff_message(conversation_id: UUID, content: str = "Chào em, cô đây") -> Message:
    return Message(conversation_id=conversation_id, sender=Sender.STAFF, content=content)


async def send(machine: TriageStateMachine, store: InMemoryMessageStore, message: Message):
    """Append a message the way the API does, then feed it to the machine."""
    await store.append(message)
    return await machine.handle_message(message)


async def system_texts(store: InMemoryMessageStore, conversation_id: UUID) -> list[str]:
    return [m.content for m in await store.list_messages(conversation_id) if m.is_system]
