"""
Integration Tests - Triage Flow

Runs the full chat and appointment pipelines over the in-memory
runtime: real classifier, parser, dispatcher and state machine, with
only the text-generation backend faked.
"""

from uuid import uuid4

import pytest

from conftest import FakeProvider, send, staff_message, student_message, system_texts
from snet_triage.api.runtime import build_runtime
from snet_triage.config import TriagePacing
from snet_triage.domain.enums.urgency import StaffRole
from snet_triage.domain.models.appointment import AppointmentRequest, StaffMember
from snet_triage.domain.models.conversation import ConversationRecord, MessageKind
from snet_triage.domain.models.triage_state import TriagePhase

CRITICAL_OUTPUT = """Đây là đánh giá:
```json
{"urgencyLevel": 3, "suicideRisk": "high", "summary": "Có ý nghĩ tự hại", "priorityNote": "Liên hệ ngay"}
```"""


@pytest.fixture
async def runtime(test_settings, script):
    provider = FakeProvider(CRITICAL_OUTPUT)
    runtime = await build_runtime(
        test_settings,
        provider=provider,
        script=script,
        pacing=TriagePacing.immediate(),
    )
    runtime.staff.add(StaffMember(id=uuid4(), role=StaffRole.COUNSELOR.value, full_name="Cô Lan"))
    runtime.staff.add(StaffMember(id=uuid4(), role=StaffRole.ADMIN.value, full_name="Admin"))
    yield runtime
    await runtime.shutdown()


class TestChatTriageFlow:

    async def test_critical_conversation(self, runtime, script) -> None:
        record = await runtime.conversations.create(ConversationRecord(student_id=uuid4()))
        cid = record.id

        await runtime.messages.append(student_message(cid, "Tôi buồn"))
        await runtime.machine.initialize(cid)
        await runtime.scheduler.drain()
        await send(runtime.machine, runtime.messages, student_message(cid, "không ngủ được"))
        await runtime.scheduler.drain()
        state = await send(runtime.machine, runtime.messages, student_message(cid, "cảm thấy bế tắc"))
        await runtime.scheduler.drain()

        assert state.phase == TriagePhase.COMPLETE
        assert await system_texts(runtime.messages, cid) == [
            script.welcome_message,
            script.questions[0],
            script.questions[1],
            script.closing_message,
            script.escalation_notice(critical=True),
        ]

        stored = await runtime.conversations.get(cid)
        assert stored.triage_complete is True
        assert stored.urgency_level == 3
        assert stored.triage_summary == "Có ý nghĩ tự hại"

        prompt = runtime.classifier.provider.prompts[0]
        for text in ["Tôi buồn", "không ngủ được", "cảm thấy bế tắc"]:
            assert text in prompt.user_message

        alerts = runtime.notifications.sent
        assert len(alerts) == 1
        assert alerts[0].category == "urgent_case"

    async def test_staff_reply_mid_triage(self, runtime, script) -> None:
        record = await runtime.conversations.create(ConversationRecord())
        cid = record.id

        await runtime.messages.append(student_message(cid, "Tôi buồn"))
        await runtime.machine.initialize(cid)
        await runtime.scheduler.drain()
        await send(runtime.machine, runtime.messages, staff_message(cid))
        await send(runtime.machine, runtime.messages, student_message(cid, "không ngủ được"))
        await send(runtime.machine, runtime.messages, student_message(cid, "cảm thấy bế tắc"))
        await runtime.scheduler.drain()

        assert await system_texts(runtime.messages, cid) == [script.welcome_message, script.questions[0]]
        assert runtime.classifier.provider.prompts == []
        stored = await runtime.conversations.get(cid)
        assert stored.triage_complete is False
        assert stored.first_staff_reply_at is not None

    async def test_backend_outage_completes_at_normal(self, runtime, script) -> None:
        runtime.classifier.provider.error = ConnectionError("backend down")
        record = await runtime.conversations.create(ConversationRecord())
        cid = record.id

        await runtime.messages.append(student_message(cid, "Tôi buồn"))
        await runtime.machine.initialize(cid)
        await runtime.scheduler.drain()
        for text in ["không ngủ được", "cảm thấy bế tắc"]:
            await send(runtime.machine, runtime.messages, student_message(cid, text))
            await runtime.scheduler.drain()

        kinds = [m.triage_kind for m in await runtime.messages.list_messages(cid) if m.is_system]
        assert kinds[-1] == MessageKind.CLOSING
        assert MessageKind.ESCALATION not in kinds
        assert (await runtime.conversations.get(cid)).urgency_level == 0
        assert runtime.notifications.sent == []


class TestAppointmentFlow:

    async def test_critical_appointment_notifies_all_staff(self, runtime) -> None:
        request = AppointmentRequest(
            full_name="Lê Văn C",
            email="c@example.com",
            time_slot="friday_11",
            issues="Em không muốn sống nữa",
        )

        result = await runtime.appointment_service.submit(request)

        assert int(result.urgency_level) == 3
        assert result.appointment.ai_analysis == "Có ý nghĩ tự hại"
        assert result.notified == 2
        titles = {n.title for n in runtime.notifications.sent}
        assert titles == {"📅 Yêu cầu đặt lịch mới (Khẩn cấp!)"}
        assert runtime.appointments.appointments[result.appointment.id].urgency_level == 3
