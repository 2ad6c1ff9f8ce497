"""
Integration Tests - HTTP API

Exercises the FastAPI routes against an injected in-memory runtime.
"""

from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from conftest import FakeProvider
from snet_triage.api.runtime import build_runtime
from snet_triage.config import TriagePacing
from snet_triage.domain.enums.urgency import StaffRole
from snet_triage.domain.models.appointment import StaffMember
from snet_triage.main import create_application

URGENT_OUTPUT = '{"urgencyLevel": 2, "suicideRisk": "low", "summary": "Căng thẳng kéo dài"}'


@pytest.fixture
async def runtime(test_settings, script):
    runtime = await build_runtime(
        test_settings,
        provider=FakeProvider(URGENT_OUTPUT),
        script=script,
        pacing=TriagePacing.immediate(),
    )
    runtime.staff.add(StaffMember(id=uuid4(), role=StaffRole.COUNSELOR.value))
    yield runtime
    await runtime.shutdown()


@pytest.fixture
async def client(runtime):
    app = create_application(runtime)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


class TestHealthEndpoints:

    async def test_health(self, client) -> None:
        response = await client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_ready_reports_provider(self, client) -> None:
        response = await client.get("/api/v1/health/ready")
        body = response.json()
        assert body["ready"] is True
        assert body["components"]["llm_provider"] == "fake"
        assert body["components"]["tracked_conversations"] == 0

    async def test_correlation_id_echoed(self, client) -> None:
        response = await client.get("/api/v1/health/live", headers={"X-Correlation-ID": "abc-123"})
        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestConversationEndpoints:

    async def test_full_triage_over_http(self, client, runtime) -> None:
        response = await client.post("/api/v1/conversations", json={"message": "Tôi buồn"})
        assert response.status_code == 201
        cid = response.json()["conversation_id"]
        assert response.json()["phase"] == "welcomed"
        await runtime.scheduler.drain()

        for text in ["không ngủ được", "cảm thấy bế tắc"]:
            response = await client.post(
                f"/api/v1/conversations/{cid}/messages",
                json={"sender": "student", "content": text},
            )
            assert response.status_code == 200
            await runtime.scheduler.drain()

        body = response.json()
        assert body["phase"] == "complete"
        assert body["urgency_level"] == 2
        assert body["urgency_label"] == "Khẩn cấp"
        assert body["urgency_icon"] == "🟠"
        assert body["urgency_description"] == "Khẩn cấp - Cần hỗ trợ sớm"
        assert body["triage_complete"] is True

        messages = (await client.get(f"/api/v1/conversations/{cid}/messages")).json()
        system = [m for m in messages if m["is_system"]]
        assert [m["metadata"]["kind"] for m in system] == [
            "welcome", "question", "question", "closing", "escalation",
        ]

    async def test_staff_message_halts(self, client, runtime) -> None:
        cid = (await client.post("/api/v1/conversations", json={"message": "Tôi buồn"})).json()["conversation_id"]

        response = await client.post(
            f"/api/v1/conversations/{cid}/messages",
            json={"sender": "staff", "content": "Chào em"},
        )
        await runtime.scheduler.drain()

        assert response.json()["halted"] is True
        status = (await client.get(f"/api/v1/conversations/{cid}")).json()
        assert status["phase"] == "halted"

    async def test_unknown_conversation_is_404(self, client) -> None:
        response = await client.post(
            f"/api/v1/conversations/{uuid4()}/messages",
            json={"sender": "student", "content": "alo"},
        )
        assert response.status_code == 404

    async def test_persistence_failure_is_503(self, client, runtime) -> None:
        cid = (await client.post("/api/v1/conversations", json={"message": "Tôi buồn"})).json()["conversation_id"]
        await runtime.scheduler.drain()
        await client.post(f"/api/v1/conversations/{cid}/messages", json={"content": "không ngủ được"})
        await runtime.scheduler.drain()
        runtime.conversations.fail_completion = ConnectionError("db down")

        response = await client.post(f"/api/v1/conversations/{cid}/messages", json={"content": "bế tắc"})

        assert response.status_code == 503

    async def test_assessment_unavailable(self, client, runtime) -> None:
        cid = (await client.post("/api/v1/conversations", json={"message": "Tôi buồn"})).json()["conversation_id"]
        runtime.classifier.provider.content = "xin lỗi, không thể đánh giá"

        body = (await client.get(f"/api/v1/conversations/{cid}/assessment")).json()

        assert body["available"] is False
        assert body["message"] == "Chưa có đánh giá từ AI"

    async def test_assessment_available(self, client) -> None:
        cid = (await client.post("/api/v1/conversations", json={"message": "Tôi buồn"})).json()["conversation_id"]

        body = (await client.get(f"/api/v1/conversations/{cid}/assessment")).json()

        assert body["available"] is True
        assert body["assessment"]["urgencyLevel"] == 2
        assert body["assessment"]["isHighRisk"] is True


class TestAppointmentEndpoints:

    async def test_time_slots(self, client) -> None:
        slots = (await client.get("/api/v1/appointments/time-slots")).json()
        assert "monday_11" in slots
        assert "other" in slots

    async def test_submit(self, client) -> None:
        response = await client.post("/api/v1/appointments", json={
            "full_name": "Phạm D",
            "email": "d@example.com",
            "time_slot": "monday_11",
            "issues": "Em bị áp lực học tập",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["urgency_level"] == 2
        assert body["time_slot_display"] == "Thứ 2, 11h00 - 12h00"
        assert body["notified"] == 1

    async def test_other_slot_requires_custom_text(self, client) -> None:
        response = await client.post("/api/v1/appointments", json={
            "full_name": "Phạm D",
            "email": "d@example.com",
            "time_slot": "other",
            "issues": "Em bị áp lực học tập",
        })
        assert response.status_code == 422
