"""
Escalation Dispatcher

Translates a stored urgency level into human-facing signals:
- a paced in-conversation notice for urgent/critical chats
- staff notifications (admins for critical chats, every counselor
  and admin for appointment requests)

SAFETY-CRITICAL: Notification fan-out is best-effort per recipient
but never fails silently. A staff directory failure is surfaced as
StaffLookupError before any notification is attempted.
"""

from typing import Awaitable, Callable, Optional, Sequence

from snet_triage.config.logging_config import get_logger
from snet_triage.config.triage_script import TriagePacing, TriageScript
from snet_triage.domain.enums.urgency import StaffRole, UrgencyLevel
from snet_triage.domain.errors import StaffLookupError
from snet_triage.domain.interfaces import MessageStore, NotificationSink, StaffDirectory
from snet_triage.domain.models.appointment import Appointment, Notification
from snet_triage.domain.models.assessment import EscalationEvent
from snet_triage.domain.models.conversation import Message, MessageKind
from snet_triage.infrastructure.metrics import (
    track_escalation,
    track_notification,
    track_triage_message,
)
from snet_triage.infrastructure.monitoring import capture_escalation_event
from snet_triage.services.triage.scheduler import DelayedTaskScheduler

logger = get_logger(__name__)

EmitGuard = Callable[[], Awaitable[bool]]


class NotificationCategory:
    APPOINTMENT_REQUEST = "appointment_request"
    URGENT_CASE = "urgent_case"


APPOINTMENT_TITLE = "📅 Yêu cầu đặt lịch mới"
APPOINTMENT_URGENT_SUFFIX = " (Khẩn cấp!)"
APPOINTMENT_LINK = "/appointments"

URGENT_CASE_TITLE = "🔴 Case RẤT KHẨN CẤP"
URGENT_CASE_BODY = "Chat với {student} đã được đánh dấu là rất khẩn cấp. Cần can thiệp ngay!"
URGENT_CASE_LINK = "/chat"

APPOINTMENT_RECIPIENT_ROLES: tuple[str, ...] = (StaffRole.COUNSELOR.value, StaffRole.ADMIN.value)
CRITICAL_CHAT_RECIPIENT_ROLES: tuple[str, ...] = (StaffRole.ADMIN.value,)


class EscalationDispatcher:
    """
    Stateless escalation signalling.

    Holds collaborators only; every decision is derived from the
    urgency level passed in.
    """

    def __init__(
        self,
        message_store: MessageStore,
        staff_directory: StaffDirectory,
        notification_sink: NotificationSink,
        scheduler: DelayedTaskScheduler,
        script: Optional[TriageScript] = None,
        pacing: Optional[TriagePacing] = None,
    ) -> None:
        self._messages = message_store
        self._staff = staff_directory
        self._sink = notification_sink
        self._scheduler = scheduler
        self._script = script or TriageScript()
        self._pacing = pacing or TriagePacing()

    def compose_notice(self, urgency_level: int) -> Optional[str]:
        """
        Localized escalation notice for a conversation.

        Returns:
            None below URGENT; urgent or critical wording otherwise
        """
        level = UrgencyLevel.coerce(urgency_level)
        if not level.is_escalation:
            return None
        return self._script.escalation_notice(critical=level >= UrgencyLevel.CRITICAL)

    async def dispatch_chat_escalation(
        self,
        event: EscalationEvent,
        should_emit: EmitGuard,
        student_name: Optional[str] = None,
    ) -> bool:
        """
        Schedule the in-conversation notice and alert admins when critical.

        Args:
            event: Escalation produced by a completed triage
            should_emit: Re-checked right before the notice is appended;
                a False result drops the notice
            student_name: Display name used in the admin notification

        Returns:
            True if a notice was scheduled
        """
        notice = self.compose_notice(event.urgency_level)
        if notice is None:
            return False

        async def emit() -> None:
            if not await should_emit():
                logger.info(
                    "Escalation notice superseded",
                    conversation_id=str(event.conversation_id),
                )
                return
            await self._messages.append(
                Message.triage(event.conversation_id, notice, MessageKind.ESCALATION)
            )
            track_triage_message(MessageKind.ESCALATION)
            logger.info(
                "Escalation notice sent",
                conversation_id=str(event.conversation_id),
                urgency_level=int(event.urgency_level),
            )

        self._scheduler.schedule(event.conversation_id, self._pacing.escalation_delay, emit)
        track_escalation(int(event.urgency_level))
        capture_escalation_event(str(event.conversation_id), int(event.urgency_level), "chat")

        if event.is_critical:
            await self._alert_admins(event, student_name)

        return True

    async def _alert_admins(self, event: EscalationEvent, student_name: Optional[str]) -> None:
        try:
            await self.notify_staff(
                CRITICAL_CHAT_RECIPIENT_ROLES,
                category=NotificationCategory.URGENT_CASE,
                title=URGENT_CASE_TITLE,
                body=URGENT_CASE_BODY.format(student=student_name or "học sinh"),
                link=URGENT_CASE_LINK,
                payload={
                    "chat_room_id": str(event.conversation_id),
                    "urgency_level": int(event.urgency_level),
                },
            )
        except StaffLookupError as e:
            # The conversation flow continues; the stored level still flags the case
            logger.error(
                "Critical case admin alert failed",
                conversation_id=str(event.conversation_id),
                error=str(e),
            )

    async def notify_appointment(self, appointment: Appointment) -> int:
        """
        Notify every counselor and admin of a new appointment request.

        Returns:
            Number of notifications delivered

        Raises:
            StaffLookupError: If the staff directory could not be queried
        """
        title = APPOINTMENT_TITLE
        if appointment.urgency_level.is_escalation:
            title += APPOINTMENT_URGENT_SUFFIX
            track_escalation(int(appointment.urgency_level))
            capture_escalation_event(
                str(appointment.id), int(appointment.urgency_level), "appointment"
            )

        return await self.notify_staff(
            APPOINTMENT_RECIPIENT_ROLES,
            category=NotificationCategory.APPOINTMENT_REQUEST,
            title=title,
            body=f"{appointment.full_name} yêu cầu đặt lịch tư vấn: {appointment.time_slot_display}",
            link=APPOINTMENT_LINK,
            payload={
                "appointment_id": str(appointment.id),
                "urgency_level": int(appointment.urgency_level),
            },
        )

    async def notify_staff(
        self,
        roles: Sequence[str],
        *,
        category: str,
        title: str,
        body: str,
        link: Optional[str] = None,
        payload: Optional[dict] = None,
    ) -> int:
        """
        Send one notification per staff member holding any of roles.

        Returns:
            Number of notifications delivered

        Raises:
            StaffLookupError: If the staff directory could not be queried
        """
        try:
            staff = await self._staff.list_users_by_role(list(roles))
        except Exception as e:
            logger.error("Staff lookup failed", roles=list(roles), error=str(e))
            raise StaffLookupError(list(roles), original_error=e) from e

        delivered = 0
        for member in staff:
            notification = Notification(
                recipient_id=member.id,
                category=category,
                title=title,
                body=body,
                link=link,
                payload=dict(payload or {}),
            )
            try:
                await self._sink.notify(notification)
            except Exception as e:
                track_notification(category, "failed")
                logger.warning(
                    "Notification delivery failed",
                    recipient_id=str(member.id),
                    category=category,
                    error=str(e),
                )
                continue
            track_notification(category, "sent")
            delivered += 1

        logger.info(
            "Staff notified",
            category=category,
            recipients=len(staff),
            delivered=delivered,
        )
        return delivered
