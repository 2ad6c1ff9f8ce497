"""
Appointment Service

Pre-screens a booking submission and alerts staff.

Flow: classify issues text -> store appointment with urgency ->
notify every counselor and admin. A classifier outage stores the
request at the default urgency; a staff lookup failure is reported on
the result and never fails the submission itself.
"""

from dataclasses import dataclass
from typing import Optional

from snet_triage.config.logging_config import get_logger
from snet_triage.domain.enums.urgency import UrgencyLevel
from snet_triage.domain.errors import StaffLookupError
from snet_triage.domain.interfaces import AppointmentStore
from snet_triage.domain.models.appointment import Appointment, AppointmentRequest
from snet_triage.domain.models.assessment import Assessment
from snet_triage.infrastructure.metrics import track_appointment
from snet_triage.services.escalation.escalation_dispatcher import EscalationDispatcher
from snet_triage.services.triage.risk_classifier import RiskClassifier

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    """
    Outcome of one appointment submission.

    Attributes:
        appointment: Stored appointment
        assessment: Parsed assessment, None when unavailable
        notified: Notifications delivered
        notification_error: Set when the staff lookup failed
    """

    appointment: Appointment
    assessment: Optional[Assessment] = None
    notified: int = 0
    notification_error: Optional[str] = None

    @property
    def urgency_level(self) -> UrgencyLevel:
        return self.appointment.urgency_level

    def to_dict(self) -> dict:
        return {
            "appointment": self.appointment.to_dict(),
            "assessment_available": self.assessment is not None,
            "notified": self.notified,
            "notification_error": self.notification_error,
        }


class AppointmentService:
    """Appointment submission with urgency pre-screening."""

    def __init__(
        self,
        store: AppointmentStore,
        classifier: RiskClassifier,
        dispatcher: EscalationDispatcher,
        notify_min_level: int = 0,
    ) -> None:
        self._store = store
        self._classifier = classifier
        self._dispatcher = dispatcher
        self._notify_min_level = UrgencyLevel.coerce(notify_min_level)

    async def submit(self, request: AppointmentRequest) -> SubmissionResult:
        """
        Store a booking request and alert staff.

        Raises:
            Exception: If the appointment itself could not be stored
        """
        assessment = await self._classifier.classify_appointment(request.issues)
        if assessment is None:
            level, analysis = UrgencyLevel.NORMAL, ""
        else:
            level, analysis = assessment.urgency_level, assessment.summary

        appointment = await self._store.create(
            Appointment.from_request(request, urgency_level=level, ai_analysis=analysis)
        )
        track_appointment(int(level))
        logger.info(
            "Appointment stored",
            appointment_id=str(appointment.id),
            urgency_level=int(level),
            assessment_available=assessment is not None,
        )

        result = SubmissionResult(appointment=appointment, assessment=assessment)

        # URGENT and above always reach staff regardless of configuration
        threshold = min(self._notify_min_level, UrgencyLevel.URGENT)
        if level < threshold:
            return result

        try:
            result.notified = await self._dispatcher.notify_appointment(appointment)
        except StaffLookupError as e:
            result.notification_error = str(e)
            logger.error(
                "Appointment stored but staff could not be notified",
                appointment_id=str(appointment.id),
                urgency_level=int(level),
            )

        return result
