"""Appointment request pre-screening."""

from snet_triage.services.appointments.appointment_service import (
    AppointmentService,
    SubmissionResult,
)

__all__ = ["AppointmentService", "SubmissionResult"]
