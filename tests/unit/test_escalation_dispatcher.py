"""
Unit Tests for the Escalation Dispatcher

Covers notice wording per level and staff notification fan-out.
"""

from uuid import uuid4

import pytest

from snet_triage.domain.enums.urgency import UrgencyLevel
from snet_triage.domain.errors import StaffLookupError
from snet_triage.domain.models.appointment import Appointment
from snet_triage.domain.models.assessment import EscalationEvent
from snet_triage.domain.models.conversation import MessageKind
from snet_triage.services.escalation import EscalationDispatcher


def make_appointment(level: int = 0) -> Appointment:
    return Appointment(
        full_name="Nguyễn Văn A",
        email="a@example.com",
        time_slot="monday_11",
        time_slot_display="Thứ 2, 11h00 - 12h00",
        issues="Em bị áp lực thi cử",
        urgency_level=UrgencyLevel(level),
    )


async def always() -> bool:
    return True


async def never() -> bool:
    return False


class TestComposeNotice:

    @pytest.mark.parametrize("level", [0, 1])
    def test_no_notice_below_urgent(self, dispatcher, level) -> None:
        assert dispatcher.compose_notice(level) is None

    def test_urgent_wording(self, dispatcher, script) -> None:
        notice = dispatcher.compose_notice(2)
        assert notice == script.escalation_notice(critical=False)
        assert "khẩn cấp" in notice
        assert "rất khẩn cấp" not in notice

    def test_critical_wording(self, dispatcher, script) -> None:
        assert dispatcher.compose_notice(3) == script.escalation_notice(critical=True)
        assert "rất khẩn cấp" in dispatcher.compose_notice(3)

    def test_out_of_range_is_clamped(self, dispatcher) -> None:
        assert dispatcher.compose_notice(9) == dispatcher.compose_notice(3)
        assert dispatcher.compose_notice(-4) is None


class TestChatEscalation:

    async def test_notice_appended_after_delay(self, dispatcher, scheduler, message_store) -> None:
        conversation_id = uuid4()
        event = EscalationEvent(conversation_id=conversation_id, urgency_level=UrgencyLevel.URGENT)

        assert await dispatcher.dispatch_chat_escalation(event, should_emit=always) is True
        await scheduler.drain()

        messages = await message_store.list_messages(conversation_id)
        assert [m.triage_kind for m in messages] == [MessageKind.ESCALATION]

    async def test_guard_drops_notice(self, dispatcher, scheduler, message_store) -> None:
        conversation_id = uuid4()
        event = EscalationEvent(conversation_id=conversation_id, urgency_level=UrgencyLevel.CRITICAL)

        await dispatcher.dispatch_chat_escalation(event, should_emit=never)
        await scheduler.drain()

        assert await message_store.list_messages(conversation_id) == []

    async def test_below_threshold_does_nothing(self, dispatcher, scheduler, notification_sink) -> None:
        event = EscalationEvent(conversation_id=uuid4(), urgency_level=UrgencyLevel.ATTENTION)

        assert await dispatcher.dispatch_chat_escalation(event, should_emit=always) is False
        assert scheduler.pending(event.conversation_id) == 0
        assert notification_sink.sent == []

    async def test_critical_alerts_admins_only(self, dispatcher, notification_sink, admins) -> None:
        event = EscalationEvent(conversation_id=uuid4(), urgency_level=UrgencyLevel.CRITICAL)

        await dispatcher.dispatch_chat_escalation(event, should_emit=always, student_name="Bình")

        assert [n.recipient_id for n in notification_sink.sent] == [a.id for a in admins]
        notification = notification_sink.sent[0]
        assert notification.title == "🔴 Case RẤT KHẨN CẤP"
        assert notification.body == "Chat với Bình đã được đánh dấu là rất khẩn cấp. Cần can thiệp ngay!"
        assert notification.link == "/chat"

    async def test_admin_lookup_failure_does_not_raise(
        self, dispatcher, scheduler, staff_directory, notification_sink, message_store,
    ) -> None:
        staff_directory.fail_lookup = ConnectionError("directory down")
        event = EscalationEvent(conversation_id=uuid4(), urgency_level=UrgencyLevel.CRITICAL)

        assert await dispatcher.dispatch_chat_escalation(event, should_emit=always) is True
        await scheduler.drain()

        assert notification_sink.sent == []
        assert len(await message_store.list_messages(event.conversation_id)) == 1


class TestAppointmentNotification:

    async def test_every_counselor_and_admin_notified(
        self, dispatcher, notification_sink, counselors, admins,
    ) -> None:
        appointment = make_appointment(level=1)

        delivered = await dispatcher.notify_appointment(appointment)

        assert delivered == 3
        assert {n.recipient_id for n in notification_sink.sent} == {
            m.id for m in [*counselors, *admins]
        }
        notification = notification_sink.sent[0]
        assert notification.category == "appointment_request"
        assert notification.title == "📅 Yêu cầu đặt lịch mới"
        assert notification.body == "Nguyễn Văn A yêu cầu đặt lịch tư vấn: Thứ 2, 11h00 - 12h00"
        assert notification.link == "/appointments"
        assert notification.payload == {
            "appointment_id": str(appointment.id),
            "urgency_level": 1,
        }

    @pytest.mark.parametrize("level", [2, 3])
    async def test_urgent_title(self, dispatcher, notification_sink, level) -> None:
        await dispatcher.notify_appointment(make_appointment(level=level))

        assert all(n.title == "📅 Yêu cầu đặt lịch mới (Khẩn cấp!)" for n in notification_sink.sent)

    async def test_lookup_failure_raises_without_sending(
        self, dispatcher, staff_directory, notification_sink,
    ) -> None:
        staff_directory.fail_lookup = ConnectionError("directory down")

        with pytest.raises(StaffLookupError) as exc_info:
            await dispatcher.notify_appointment(make_appointment())

        assert isinstance(exc_info.value.original_error, ConnectionError)
        assert notification_sink.sent == []

    async def test_recipient_failure_does_not_stop_fan_out(
        self, dispatcher, notification_sink, counselors, admins,
    ) -> None:
        notification_sink.failing_recipients.add(counselors[0].id)

        delivered = await dispatcher.notify_appointment(make_appointment())

        assert delivered == 2
        assert {n.recipient_id for n in notification_sink.sent} == {counselors[1].id, admins[0].id}

    async def test_no_staff_delivers_nothing(
        self, message_store, notification_sink, scheduler, script, pacing,
    ) -> None:
        from snet_triage.infrastructure.stores import InMemoryStaffDirectory

        empty = EscalationDispatcher(
            message_store, InMemoryStaffDirectory(), notification_sink, scheduler,
            script=script, pacing=pacing,
        )

        assert await empty.notify_appointment(make_appointment()) == 0
