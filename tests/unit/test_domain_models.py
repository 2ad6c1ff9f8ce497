"""Unit Tests for Urgency Vocabulary and Conversation Helpers"""

from uuid import uuid4

import pytest

from snet_triage.domain.enums.urgency import Sender, SuicideRisk, UrgencyLevel
from snet_triage.domain.models import (
    Assessment,
    ConversationRecord,
    Message,
    MessageKind,
    is_ai_message,
    should_ai_respond,
)
from snet_triage.domain.models.conversation import utcnow


class TestUrgencyLevel:

    @pytest.mark.parametrize("raw, expected", [(-1, 0), (0, 0), (2, 2), (3, 3), (7, 3)])
    def test_coerce_clamps(self, raw, expected) -> None:
        assert UrgencyLevel.coerce(raw) == expected

    def test_vocabulary(self) -> None:
        critical = UrgencyLevel.CRITICAL
        assert critical.label == "Rất khẩn cấp"
        assert critical.icon == "🔴"
        assert critical.description.endswith("Cần can thiệp ngay")

    def test_escalation_threshold(self) -> None:
        assert [level.is_escalation for level in UrgencyLevel] == [False, False, True, True]


class TestAssessment:

    @pytest.mark.parametrize("urgency, risk, expected", [
        (UrgencyLevel.NORMAL, SuicideRisk.NONE, False),
        (UrgencyLevel.ATTENTION, SuicideRisk.LOW, False),
        (UrgencyLevel.ATTENTION, SuicideRisk.MEDIUM, True),
        (UrgencyLevel.URGENT, SuicideRisk.NONE, True),
    ])
    def test_high_risk(self, urgency, risk, expected) -> None:
        assert Assessment(urgency_level=urgency, suicide_risk=risk).is_high_risk is expected


class TestConversationHelpers:

    def test_should_ai_respond(self) -> None:
        assert should_ai_respond(ConversationRecord()) is True
        assert should_ai_respond(ConversationRecord(first_staff_reply_at=utcnow())) is False
        assert should_ai_respond(ConversationRecord(triage_complete=True)) is False

    def test_triage_messages_are_tagged(self) -> None:
        message = Message.triage(uuid4(), "Xin chào", MessageKind.WELCOME)

        assert is_ai_message(message)
        assert message.sender == Sender.SYSTEM
        assert message.triage_kind == MessageKind.WELCOME

    def test_other_system_messages_are_not_triage(self) -> None:
        message = Message(uuid4(), Sender.SYSTEM, "Phòng chat đã mở", is_system=True)

        assert not is_ai_message(message)
        assert message.triage_kind is None
