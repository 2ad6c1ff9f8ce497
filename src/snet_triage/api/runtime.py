"""
Triage Runtime Wiring

Builds the collaborator graph (stores, classifier, dispatcher, state
machine, appointment service) for the configured storage backend.
One runtime lives on app.state for the lifetime of the application.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from snet_triage.config import Settings, TriagePacing, TriageScript
from snet_triage.config.logging_config import get_logger
from snet_triage.domain.interfaces import (
    AppointmentStore,
    ConversationStore,
    MessageStore,
    NotificationSink,
    StaffDirectory,
)
from snet_triage.infrastructure.database import DatabaseManager
from snet_triage.infrastructure.llm import LLMProvider, LLMProviderType, get_llm_provider
from snet_triage.services.appointments import AppointmentService
from snet_triage.services.escalation import EscalationDispatcher
from snet_triage.services.triage.risk_classifier import RiskClassifier
from snet_triage.services.triage.scheduler import DelayedTaskScheduler
from snet_triage.services.triage.state_machine import TriageStateMachine

logger = get_logger(__name__)


@dataclass
class TriageRuntime:
    """Everything the HTTP layer needs, wired once."""

    messages: MessageStore
    conversations: ConversationStore
    appointments: AppointmentStore
    staff: StaffDirectory
    notifications: NotificationSink
    classifier: RiskClassifier
    dispatcher: EscalationDispatcher
    machine: TriageStateMachine
    appointment_service: AppointmentService
    scheduler: DelayedTaskScheduler
    db: Optional[DatabaseManager] = None

    async def shutdown(self) -> None:
        await self.scheduler.shutdown()
        if self.db is not None:
            await self.db.close()


async def build_runtime(
    settings: Settings,
    *,
    provider: Optional[LLMProvider] = None,
    script: Optional[TriageScript] = None,
    pacing: Optional[TriagePacing] = None,
) -> TriageRuntime:
    """
    Wire the runtime for settings.storage_backend.

    Args:
        settings: Application settings
        provider: Text-generation backend override (tests)
        script: Triage script override
        pacing: Pacing override
    """
    script = script or TriageScript()
    pacing = pacing or TriagePacing.from_settings(settings)
    provider = provider or get_llm_provider(LLMProviderType(settings.llm_primary_provider))

    db: Optional[DatabaseManager] = None
    if settings.storage_backend == "postgres":
        from snet_triage.infrastructure.database.repositories import (
            SqlAppointmentStore,
            SqlConversationStore,
            SqlMessageStore,
            SqlNotificationSink,
            SqlStaffDirectory,
        )

        db = DatabaseManager(settings)
        await db.initialize()
        messages = SqlMessageStore(db)
        conversations = SqlConversationStore(db)
        appointments = SqlAppointmentStore(db)
        staff = SqlStaffDirectory(db)
        notifications = SqlNotificationSink(db)
    else:
        from snet_triage.infrastructure.stores import (
            InMemoryAppointmentStore,
            InMemoryConversationStore,
            InMemoryMessageStore,
            InMemoryNotificationSink,
            InMemoryStaffDirectory,
        )

        messages = InMemoryMessageStore()
        conversations = InMemoryConversationStore()
        appointments = InMemoryAppointmentStore()
        staff = InMemoryStaffDirectory()
        notifications = InMemoryNotificationSink()

    scheduler = DelayedTaskScheduler()
    classifier = RiskClassifier(
        provider,
        script,
        timeout_seconds=settings.triage.classification_timeout_seconds,
        max_tokens=settings.triage.max_output_tokens,
        temperature=settings.triage.temperature,
    )
    dispatcher = EscalationDispatcher(
        messages,
        staff,
        notifications,
        scheduler,
        script=script,
        pacing=pacing,
    )
    machine = TriageStateMachine(
        messages,
        conversations,
        classifier,
        dispatcher,
        script=script,
        pacing=pacing,
        scheduler=scheduler,
    )
    appointment_service = AppointmentService(
        appointments,
        classifier,
        dispatcher,
        notify_min_level=settings.triage.appointment_notify_min_level,
    )

    logger.info(
        "Triage runtime built",
        storage_backend=settings.storage_backend,
        provider=provider.provider_name,
        questions=script.question_count,
    )

    return TriageRuntime(
        messages=messages,
        conversations=conversations,
        appointments=appointments,
        staff=staff,
        notifications=notifications,
        classifier=classifier,
        dispatcher=dispatcher,
        machine=machine,
        appointment_service=appointment_service,
        scheduler=scheduler,
        db=db,
    )


def get_runtime(request: Request) -> TriageRuntime:
    """FastAPI dependency returning the application's runtime."""
    runtime = getattr(request.app.state, "runtime", None)
    if runtime is None:
        raise RuntimeError("Triage runtime not initialized")
    return runtime
