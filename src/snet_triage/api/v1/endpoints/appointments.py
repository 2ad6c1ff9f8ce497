"""
Appointment Endpoints

Booking submissions with urgency pre-screening and staff alerts.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, model_validator

from snet_triage.api.runtime import TriageRuntime, get_runtime
from snet_triage.domain.models.appointment import OTHER_TIME_SLOT, TIME_SLOTS, AppointmentRequest

router = APIRouter()


class AppointmentSubmission(BaseModel):
    """Booking form. Guests submit without a student_id."""

    full_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=255)
    class_name: Optional[str] = Field(default=None, max_length=50)
    dorm_room: Optional[str] = Field(default=None, max_length=50)
    time_slot: str
    custom_time_slot: Optional[str] = Field(default=None, max_length=200)
    issues: str = Field(..., min_length=1, max_length=4000)
    student_id: Optional[UUID] = None

    @model_validator(mode="after")
    def check_time_slot(self) -> "AppointmentSubmission":
        if self.time_slot not in TIME_SLOTS:
            raise ValueError(f"Unknown time slot: {self.time_slot}")
        if self.time_slot == OTHER_TIME_SLOT and not (self.custom_time_slot or "").strip():
            raise ValueError("custom_time_slot is required when time_slot is 'other'")
        return self

    def to_request(self) -> AppointmentRequest:
        return AppointmentRequest(
            full_name=self.full_name.strip(),
            email=self.email.strip(),
            time_slot=self.time_slot,
            issues=self.issues,
            class_name=self.class_name,
            dorm_room=self.dorm_room,
            custom_time_slot=self.custom_time_slot,
            student_id=self.student_id,
        )


class AppointmentSubmissionResponse(BaseModel):
    appointment_id: UUID
    urgency_level: int
    urgency_label: str
    time_slot_display: str
    assessment_available: bool
    notified: int
    notification_error: Optional[str] = None


@router.get("/time-slots", summary="List bookable time slots")
async def list_time_slots() -> dict[str, str]:
    return dict(TIME_SLOTS)


@router.post(
    "",
    response_model=AppointmentSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit an appointment request",
)
async def submit_appointment(
    submission: AppointmentSubmission,
    runtime: TriageRuntime = Depends(get_runtime),
) -> AppointmentSubmissionResponse:
    """
    Pre-screen and store a booking request, then alert staff.

    A staff notification failure is reported in the body; the
    request itself is still stored.
    """
    result = await runtime.appointment_service.submit(submission.to_request())
    appointment = result.appointment

    return AppointmentSubmissionResponse(
        appointment_id=appointment.id,
        urgency_level=int(appointment.urgency_level),
        urgency_label=appointment.urgency_level.label,
        time_slot_display=appointment.time_slot_display,
        assessment_available=result.assessment is not None,
        notified=result.notified,
        notification_error=result.notification_error,
    )
