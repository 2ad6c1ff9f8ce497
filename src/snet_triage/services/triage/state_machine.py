"""
Triage State Machine

Sequences the automated pre-counselor conversation:

    not_started -> welcomed -> questioning(0..N) -> analyzing -> complete
                 any phase -> halted (staff reply observed)

SAFETY-CRITICAL:
- Halt is evaluated before any phase decision and is irreversible.
  Nothing automated is appended once a staff message is observed.
- At most one classification is in flight per conversation; student
  messages for the same conversation are processed one at a time.
- Urgency and completion are persisted as one write before any
  closing or escalation message is sent.

ARCHITECTURE: The machine exclusively owns TriageState. The classifier
and the escalation dispatcher only read inputs and return results.
"""

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from uuid import UUID

from snet_triage.config.logging_config import get_logger
from snet_triage.config.triage_script import TriagePacing, TriageScript
from snet_triage.domain.enums.urgency import Sender, UrgencyLevel
from snet_triage.domain.errors import ConversationNotFoundError, TriagePersistenceError
from snet_triage.domain.interfaces import ConversationStore, MessageStore, TriageClassifier
from snet_triage.domain.models.assessment import EscalationEvent, TriageOutcome
from snet_triage.domain.models.conversation import (
    ConversationRecord,
    Message,
    MessageKind,
    is_ai_message,
    should_ai_respond,
)
from snet_triage.domain.models.triage_state import TriagePhase, TriageState
from snet_triage.infrastructure.metrics import (
    TRIAGE_PERSISTENCE_FAILURES,
    track_triage_completion,
    track_triage_halt,
    track_triage_message,
)
from snet_triage.infrastructure.monitoring import set_conversation_context
from snet_triage.services.escalation.escalation_dispatcher import EscalationDispatcher
from snet_triage.services.triage.scheduler import DelayedTaskScheduler

logger = get_logger(__name__)


class TriageStateMachine:
    """
    Per-conversation automated triage.

    Usage:
        machine = TriageStateMachine(messages, conversations, classifier, dispatcher)
        await machine.initialize(conversation_id)
        await machine.handle_message(student_message)
    """

    def __init__(
        self,
        message_store: MessageStore,
        conversation_store: ConversationStore,
        classifier: TriageClassifier,
        dispatcher: EscalationDispatcher,
        script: Optional[TriageScript] = None,
        pacing: Optional[TriagePacing] = None,
        scheduler: Optional[DelayedTaskScheduler] = None,
    ) -> None:
        self._messages = message_store
        self._conversations = conversation_store
        self._classifier = classifier
        self._dispatcher = dispatcher
        self._script = script or TriageScript()
        self._pacing = pacing or TriagePacing()
        self._scheduler = scheduler or DelayedTaskScheduler()

        # Terminal conversations are evicted once nothing holds or awaits
        # their lock; they are rebuilt from storage on the next event.
        self._states: dict[UUID, TriageState] = {}
        self._locks: dict[UUID, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._users: dict[UUID, int] = defaultdict(int)

    @property
    def scheduler(self) -> DelayedTaskScheduler:
        return self._scheduler

    @property
    def tracked_conversations(self) -> frozenset[UUID]:
        """Conversations whose triage state is currently held in memory."""
        return frozenset(self._states)

    # =========================================================================
    # PUBLIC OPERATIONS
    # =========================================================================

    async def initialize(self, conversation_id: UUID) -> TriageState:
        """
        Start triage for a conversation: welcome, then the first question.

        Idempotent: a conversation already past not_started is left as is.

        Raises:
            ConversationNotFoundError: If no record exists
        """
        async with self._exclusive(conversation_id):
            state = await self._ensure_state(conversation_id)
            if state.phase == TriagePhase.NOT_STARTED:
                await self._start(conversation_id, state)
            return state

    async def handle_message(self, message: Message) -> TriageState:
        """
        Feed one newly appended message into the machine.

        Staff messages halt triage immediately. Student messages advance
        the scripted questions or trigger analysis. Automated messages
        are ignored.

        Raises:
            ConversationNotFoundError: If no record exists
            TriagePersistenceError: If the urgency + completion write failed
        """
        conversation_id = message.conversation_id

        if message.sender == Sender.STAFF:
            return await self.halt(conversation_id)

        if message.is_system or message.sender != Sender.STUDENT:
            return self._states.get(conversation_id) or TriageState()

        async with self._exclusive(conversation_id):
            state = await self._ensure_state(conversation_id)
            if state.is_terminal:
                return state

            record = await self._require_record(conversation_id)
            if self._apply_record(conversation_id, state, record):
                return state

            if state.phase == TriagePhase.NOT_STARTED:
                await self._start(conversation_id, state)
                return state

            if state.question_pending:
                logger.debug(
                    "Question pending, message does not advance triage",
                    conversation_id=str(conversation_id),
                    question_index=state.question_index,
                )
                return state

            if state.question_index < self._script.question_count:
                self._schedule_question(conversation_id, state, self._pacing.next_question_delay)
                return state

            await self._analyze(conversation_id, state)
            return state

    async def halt(self, conversation_id: UUID) -> TriageState:
        """
        Stop automated triage for good.

        The in-memory phase flips before any suspension point so that a
        concurrently resolving classification observes it.
        """
        tracked = conversation_id in self._states
        state = self._states.setdefault(conversation_id, TriageState())
        if state.is_halted:
            return state

        previous = state.phase
        state.halt()
        cancelled = self._scheduler.cancel(conversation_id)
        try:
            if not tracked:
                # Evicted or never seen: only the first staff reply counts
                record = await self._conversations.get(conversation_id)
                if record is None or record.first_staff_reply_at is not None:
                    return state
                if record.triage_complete:
                    previous = TriagePhase.COMPLETE
            track_triage_halt(previous.value)
            logger.info(
                "Triage halted by staff reply",
                conversation_id=str(conversation_id),
                previous_phase=previous.value,
                cancelled_steps=cancelled,
            )
            await self._conversations.mark_staff_reply(conversation_id)
        finally:
            self._release(conversation_id)
        return state

    async def get_state(self, conversation_id: UUID) -> TriageState:
        """Current state, recovered from storage when not tracked."""
        async with self._exclusive(conversation_id):
            return await self._ensure_state(conversation_id)

    # =========================================================================
    # PER-CONVERSATION REGISTRY
    # =========================================================================

    @asynccontextmanager
    async def _exclusive(self, conversation_id: UUID) -> AsyncIterator[None]:
        """Hold the conversation lock, counting holders and waiters."""
        self._users[conversation_id] += 1
        try:
            async with self._locks[conversation_id]:
                yield
        finally:
            self._users[conversation_id] -= 1
            if not self._users[conversation_id]:
                del self._users[conversation_id]
                self._release(conversation_id)

    def _release(self, conversation_id: UUID) -> None:
        """Drop state and lock of an idle conversation that is terminal or unknown."""
        if conversation_id in self._users:
            return
        state = self._states.get(conversation_id)
        if state is not None and not state.is_terminal:
            return
        self._states.pop(conversation_id, None)
        self._locks.pop(conversation_id, None)

    # =========================================================================
    # TRANSITIONS
    # =========================================================================

    async def _start(self, conversation_id: UUID, state: TriageState) -> None:
        await self._emit(conversation_id, self._script.welcome_message, MessageKind.WELCOME)
        state.phase = TriagePhase.WELCOMED
        logger.info("Triage started", conversation_id=str(conversation_id))

        if self._script.question_count:
            self._schedule_question(conversation_id, state, self._pacing.first_question_delay)

    def _schedule_question(self, conversation_id: UUID, state: TriageState, delay: float) -> None:
        index = state.question_index
        text = self._script.question_at(index)
        if text is None:
            return
        state.question_pending = True

        async def send() -> None:
            async with self._exclusive(conversation_id):
                if state.is_halted or not state.question_pending:
                    return
                await self._emit(conversation_id, text, MessageKind.QUESTION)
                state.question_index = index + 1
                state.question_pending = False
                state.phase = TriagePhase.QUESTIONING

        self._scheduler.schedule(conversation_id, delay, send)

    async def _analyze(self, conversation_id: UUID, state: TriageState) -> None:
        state.phase = TriagePhase.ANALYZING
        set_conversation_context(str(conversation_id), state.phase.value)

        history = await self._messages.list_messages(conversation_id)
        student_texts = [m.content for m in history if m.sender == Sender.STUDENT]

        try:
            assessment = await self._classifier.classify(student_texts)
        except Exception as e:
            logger.error(
                "Classification failed - using default urgency",
                conversation_id=str(conversation_id),
                error_type=type(e).__name__,
                error=str(e),
            )
            assessment = None

        if state.is_halted:
            logger.info(
                "Assessment discarded after halt",
                conversation_id=str(conversation_id),
            )
            return

        if assessment is None:
            logger.warning(
                "Assessment unavailable - defaulting to normal urgency",
                conversation_id=str(conversation_id),
                student_messages=len(student_texts),
            )
        level = assessment.urgency_level if assessment else UrgencyLevel.NORMAL
        summary = assessment.summary if assessment else ""

        try:
            await self._conversations.complete_triage(conversation_id, int(level), summary)
        except Exception as e:
            TRIAGE_PERSISTENCE_FAILURES.inc()
            if not state.is_halted:
                state.phase = TriagePhase.QUESTIONING
            logger.error(
                "Failed to persist triage result",
                conversation_id=str(conversation_id),
                error=str(e),
            )
            raise TriagePersistenceError(conversation_id, original_error=e) from e

        state.urgency_level = level
        track_triage_completion(int(level))
        if state.is_halted:
            return

        escalation = None
        if level.is_escalation:
            escalation = EscalationEvent(
                conversation_id=conversation_id,
                urgency_level=level,
                reasoning=summary,
            )
        state.phase = TriagePhase.COMPLETE
        state.outcome = TriageOutcome(
            urgency_level=level,
            assessment=assessment,
            escalation=escalation,
        )
        logger.info(
            "Triage complete",
            conversation_id=str(conversation_id),
            urgency_level=int(level),
            assessment_available=assessment is not None,
        )

        await self._emit(conversation_id, self._script.closing_message, MessageKind.CLOSING)

        if escalation is not None:
            await self._dispatcher.dispatch_chat_escalation(
                escalation,
                should_emit=lambda: self._still_active(conversation_id),
            )

    async def _still_active(self, conversation_id: UUID) -> bool:
        state = self._states.get(conversation_id)
        if state is not None:
            return not state.is_halted
        record = await self._conversations.get(conversation_id)
        return record is not None and record.first_staff_reply_at is None

    async def _emit(self, conversation_id: UUID, content: str, kind: str) -> None:
        await self._messages.append(Message.triage(conversation_id, content, kind))
        track_triage_message(kind)

    # =========================================================================
    # STATE RECOVERY
    # =========================================================================

    async def _require_record(self, conversation_id: UUID) -> ConversationRecord:
        record = await self._conversations.get(conversation_id)
        if record is None:
            raise ConversationNotFoundError(conversation_id)
        return record

    def _apply_record(
        self,
        conversation_id: UUID,
        state: TriageState,
        record: ConversationRecord,
    ) -> bool:
        """Move to a terminal phase if the stored record says so."""
        if should_ai_respond(record):
            return False
        if record.first_staff_reply_at is not None:
            if not state.is_halted:
                state.halt()
                self._scheduler.cancel(conversation_id)
            return True
        state.phase = TriagePhase.COMPLETE
        state.question_pending = False
        state.urgency_level = record.urgency
        return True

    async def _ensure_state(self, conversation_id: UUID) -> TriageState:
        state = self._states.get(conversation_id)
        if state is not None:
            return state

        record = await self._require_record(conversation_id)
        state = TriageState()
        if not self._apply_record(conversation_id, state, record):
            await self._recover_from_history(conversation_id, state)

        # A concurrent halt may have registered a state while we awaited
        return self._states.setdefault(conversation_id, state)

    async def _recover_from_history(self, conversation_id: UUID, state: TriageState) -> None:
        """
        Rebuild phase and question index from the message history.

        Questions already visible in history are never re-sent.
        """
        history = await self._messages.list_messages(conversation_id)
        if any(m.sender == Sender.STAFF for m in history):
            state.halt()
            return

        kinds = [m.triage_kind for m in history if is_ai_message(m)]
        if MessageKind.CLOSING in kinds:
            state.phase = TriagePhase.COMPLETE
            return

        asked = kinds.count(MessageKind.QUESTION)
        if asked:
            state.phase = TriagePhase.QUESTIONING
            state.question_index = min(asked, self._script.question_count)
        elif MessageKind.WELCOME in kinds:
            state.phase = TriagePhase.WELCOMED

        if state.phase != TriagePhase.NOT_STARTED:
            logger.info(
                "Triage state recovered from history",
                conversation_id=str(conversation_id),
                phase=state.phase.value,
                question_index=state.question_index,
            )
