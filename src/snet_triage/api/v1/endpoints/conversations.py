"""
Conversation Endpoints

Chat sessions with automated pre-counselor triage. Every appended
message is fed to the triage state machine; staff messages halt it.
"""

from typing import Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from snet_triage.api.runtime import TriageRuntime, get_runtime
from snet_triage.config.logging_config import bind_conversation, get_logger
from snet_triage.domain.enums.urgency import Sender
from snet_triage.domain.errors import ConversationNotFoundError, TriagePersistenceError
from snet_triage.domain.models.conversation import ConversationRecord, Message
from snet_triage.domain.models.triage_state import TriageState

logger = get_logger(__name__)
router = APIRouter()

NO_ASSESSMENT_MESSAGE = "Chưa có đánh giá từ AI"


# Request/Response Models

class CreateConversationRequest(BaseModel):
    """Open a conversation with the student's first message."""

    student_id: Optional[UUID] = Field(default=None, description="Student ID")
    message: str = Field(..., min_length=1, max_length=4000, description="Opening message")


class SendMessageRequest(BaseModel):
    sender: Literal["student", "staff"] = Field(default="student")
    content: str = Field(..., min_length=1, max_length=4000)


class TriageStatusResponse(BaseModel):
    """Triage progress of one conversation."""

    conversation_id: UUID
    phase: str
    question_index: int
    question_pending: bool
    urgency_level: Optional[int] = None
    urgency_label: Optional[str] = None
    urgency_icon: Optional[str] = None
    urgency_description: Optional[str] = None
    triage_complete: bool
    halted: bool


class MessageResponse(BaseModel):
    id: UUID
    sender: str
    content: str
    is_system: bool
    metadata: dict
    created_at: str


class AssessmentResponse(BaseModel):
    """On-demand assessment for counselor display."""

    conversation_id: UUID
    available: bool
    message: Optional[str] = None
    assessment: Optional[dict] = None


def _status(conversation_id: UUID, state: TriageState, record: ConversationRecord) -> TriageStatusResponse:
    level = state.urgency_level if state.urgency_level is not None else record.urgency
    return TriageStatusResponse(
        conversation_id=conversation_id,
        phase=state.phase.value,
        question_index=state.question_index,
        question_pending=state.question_pending,
        urgency_level=int(level) if level is not None else None,
        urgency_label=level.label if level is not None else None,
        urgency_icon=level.icon if level is not None else None,
        urgency_description=level.description if level is not None else None,
        triage_complete=record.triage_complete,
        halted=state.is_halted,
    )


async def _require_record(runtime: TriageRuntime, conversation_id: UUID) -> ConversationRecord:
    record = await runtime.conversations.get(conversation_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Conversation {conversation_id} not found",
        )
    return record


@router.post(
    "",
    response_model=TriageStatusResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a conversation and start triage",
)
async def create_conversation(
    request: CreateConversationRequest,
    runtime: TriageRuntime = Depends(get_runtime),
) -> TriageStatusResponse:
    """
    Create the conversation, store the opening message and start triage.

    The welcome message is appended immediately; the first scripted
    question follows after the configured delay.
    """
    record = await runtime.conversations.create(ConversationRecord(student_id=request.student_id))
    bind_conversation(str(record.id))

    await runtime.messages.append(
        Message(conversation_id=record.id, sender=Sender.STUDENT, content=request.message)
    )
    state = await runtime.machine.initialize(record.id)

    logger.info("Conversation created", conversation_id=str(record.id))
    return _status(record.id, state, record)


@router.post(
    "/{conversation_id}/messages",
    response_model=TriageStatusResponse,
    summary="Append a message and advance triage",
)
async def send_message(
    conversation_id: UUID,
    request: SendMessageRequest,
    runtime: TriageRuntime = Depends(get_runtime),
) -> TriageStatusResponse:
    """
    Append a student or staff message.

    A staff message halts automated triage permanently. A student
    message may trigger the next question or the risk analysis.
    """
    await _require_record(runtime, conversation_id)
    bind_conversation(str(conversation_id))

    message = await runtime.messages.append(
        Message(
            conversation_id=conversation_id,
            sender=Sender(request.sender),
            content=request.content,
        )
    )

    try:
        state = await runtime.machine.handle_message(message)
    except ConversationNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Conversation {conversation_id} not found",
        )
    except TriagePersistenceError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Triage result could not be saved. Please try again.",
        )

    record = await _require_record(runtime, conversation_id)
    return _status(conversation_id, state, record)


@router.get(
    "/{conversation_id}",
    response_model=TriageStatusResponse,
    summary="Get triage status",
)
async def get_conversation(
    conversation_id: UUID,
    runtime: TriageRuntime = Depends(get_runtime),
) -> TriageStatusResponse:
    record = await _require_record(runtime, conversation_id)
    state = await runtime.machine.get_state(conversation_id)
    return _status(conversation_id, state, record)


@router.get(
    "/{conversation_id}/messages",
    response_model=list[MessageResponse],
    summary="List conversation messages",
)
async def list_messages(
    conversation_id: UUID,
    runtime: TriageRuntime = Depends(get_runtime),
) -> list[MessageResponse]:
    await _require_record(runtime, conversation_id)
    messages = await runtime.messages.list_messages(conversation_id)
    return [MessageResponse(**m.to_dict()) for m in messages]


@router.get(
    "/{conversation_id}/assessment",
    response_model=AssessmentResponse,
    summary="Assess the conversation for counselor display",
)
async def get_assessment(
    conversation_id: UUID,
    runtime: TriageRuntime = Depends(get_runtime),
) -> AssessmentResponse:
    """
    Recompute the full assessment from the transcript.

    Only urgency and summary are persisted, so the detailed fields are
    produced on demand. When the backend cannot produce one, the
    response says so explicitly instead of returning zeroed data.
    """
    await _require_record(runtime, conversation_id)
    messages = await runtime.messages.list_messages(conversation_id)
    assessment = await runtime.classifier.assess_transcript(messages)

    if assessment is None:
        return AssessmentResponse(
            conversation_id=conversation_id,
            available=False,
            message=NO_ASSESSMENT_MESSAGE,
        )

    return AssessmentResponse(
        conversation_id=conversation_id,
        available=True,
        assessment=assessment.to_dict(),
    )
