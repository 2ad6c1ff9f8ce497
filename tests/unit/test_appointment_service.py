"""Unit Tests for Appointment Submission"""

import pytest

from conftest import FakeProvider
from snet_triage.domain.enums.urgency import UrgencyLevel
from snet_triage.domain.models.appointment import AppointmentRequest
from snet_triage.services.appointments import AppointmentService
from snet_triage.services.triage.risk_classifier import RiskClassifier


def make_request(**overrides) -> AppointmentRequest:
    fields = {
        "full_name": "Trần Thị B",
        "email": "b@example.com",
        "time_slot": "tuesday_11",
        "issues": "Em thấy rất căng thẳng vì chuyện gia đình",
    }
    fields.update(overrides)
    return AppointmentRequest(**fields)


def build_service(provider, appointment_store, dispatcher, script, notify_min_level=0):
    classifier = RiskClassifier(provider, script, timeout_seconds=1.0)
    return AppointmentService(appointment_store, classifier, dispatcher, notify_min_level=notify_min_level)


class TestAppointmentService:

    async def test_stores_classified_urgency(
        self, appointment_store, dispatcher, script, notification_sink,
    ) -> None:
        provider = FakeProvider('{"urgencyLevel": 2, "summary": "Căng thẳng gia đình kéo dài"}')
        service = build_service(provider, appointment_store, dispatcher, script)

        result = await service.submit(make_request())

        stored = appointment_store.appointments[result.appointment.id]
        assert stored.urgency_level == UrgencyLevel.URGENT
        assert stored.ai_analysis == "Căng thẳng gia đình kéo dài"
        assert stored.time_slot_display == "Thứ 3, 11h00 - 12h00"
        assert result.notified == 3
        assert all(n.title.endswith("(Khẩn cấp!)") for n in notification_sink.sent)

    async def test_classifier_outage_uses_default(
        self, appointment_store, dispatcher, script, notification_sink,
    ) -> None:
        provider = FakeProvider(error=ConnectionError("backend down"))
        service = build_service(provider, appointment_store, dispatcher, script)

        result = await service.submit(make_request())

        assert result.assessment is None
        assert result.urgency_level == UrgencyLevel.NORMAL
        assert result.appointment.ai_analysis == ""
        assert result.notified == 3

    async def test_malformed_output_uses_default(self, appointment_store, dispatcher, script) -> None:
        service = build_service(FakeProvider("không phải JSON"), appointment_store, dispatcher, script)

        result = await service.submit(make_request())

        assert result.urgency_level == UrgencyLevel.NORMAL
        assert result.to_dict()["assessment_available"] is False

    async def test_custom_time_slot(self, appointment_store, dispatcher, script) -> None:
        service = build_service(FakeProvider(), appointment_store, dispatcher, script)

        result = await service.submit(make_request(time_slot="other", custom_time_slot="Chiều thứ 7"))

        assert result.appointment.time_slot == "other:Chiều thứ 7"
        assert result.appointment.time_slot_display == "Chiều thứ 7"

    async def test_lookup_failure_keeps_submission(
        self, appointment_store, dispatcher, script, staff_directory,
    ) -> None:
        staff_directory.fail_lookup = ConnectionError("directory down")
        service = build_service(FakeProvider(), appointment_store, dispatcher, script)

        result = await service.submit(make_request())

        assert result.appointment.id in appointment_store.appointments
        assert result.notified == 0
        assert result.notification_error is not None

    async def test_store_failure_propagates(self, dispatcher, script, notification_sink) -> None:
        class BrokenStore:
            async def create(self, appointment):
                raise ConnectionError("db down")

        service = build_service(FakeProvider(), BrokenStore(), dispatcher, script)

        with pytest.raises(ConnectionError):
            await service.submit(make_request())
        assert notification_sink.sent == []

    @pytest.mark.parametrize("level, expected", [(0, 0), (1, 0), (2, 3), (3, 3)])
    async def test_notify_threshold_never_hides_urgent(
        self, appointment_store, dispatcher, script, level, expected,
    ) -> None:
        provider = FakeProvider(f'{{"urgencyLevel": {level}, "summary": "x"}}')
        service = build_service(provider, appointment_store, dispatcher, script, notify_min_level=3)

        result = await service.submit(make_request())

        assert result.notified == expected


class TestHostileClassifierOutput:

    async def test_unparseable_output_stored_at_normal(
        self, appointment_store, dispatcher, script, notification_sink,
    ) -> None:
        provider = FakeProvider('{"urgencyLevel": ' + "9" * 5000 + "}")
        service = build_service(provider, appointment_store, dispatcher, script)

        result = await service.submit(make_request())

        assert result.urgency_level == UrgencyLevel.NORMAL
        assert result.appointment.id in appointment_store.appointments
        assert result.notified == 3

    async def test_huge_urgency_string_clamped(self, appointment_store, dispatcher, script) -> None:
        provider = FakeProvider('{"urgencyLevel": "' + "9" * 5000 + '", "summary": "x"}')
        service = build_service(provider, appointment_store, dispatcher, script)

        result = await service.submit(make_request())

        assert result.urgency_level == UrgencyLevel.CRITICAL
