"""
Urgency and Risk Enumerations

Defines the fixed ordinal urgency scale used for conversations and
appointment requests, and the categorical suicide-risk assessment.

CLINICAL_REVIEW_REQUIRED: Labels and thresholds should be validated
by the counseling team before deployment.
"""

from enum import IntEnum, StrEnum


class UrgencyLevel(IntEnum):
    """
    Ordinal urgency classification (0-3).

    The scale is fixed; the classifier never invents new levels and
    every backend value is clamped into this range.
    """

    NORMAL = 0
    """Routine counseling request, no concerning signs."""

    ATTENTION = 1
    """Some difficulties worth monitoring."""

    URGENT = 2
    """Significant distress, needs support soon."""

    CRITICAL = 3
    """
    Immediate intervention needed.

    SAFETY_NOTE: Danger or self-harm indicators. Triggers the
    "critical" escalation wording and admin notifications.
    """

    @property
    def label(self) -> str:
        return _URGENCY_LABELS[self]

    @property
    def icon(self) -> str:
        return _URGENCY_ICONS[self]

    @property
    def description(self) -> str:
        return _URGENCY_DESCRIPTIONS[self]

    @property
    def is_escalation(self) -> bool:
        """Whether this level crosses the escalation threshold."""
        return self >= UrgencyLevel.URGENT

    @classmethod
    def coerce(cls, value: int) -> "UrgencyLevel":
        """Clamp an integer into the urgency range."""
        return cls(min(int(cls.CRITICAL), max(int(cls.NORMAL), int(value))))


_URGENCY_LABELS: dict[UrgencyLevel, str] = {
    UrgencyLevel.NORMAL: "Bình thường",
    UrgencyLevel.ATTENTION: "Cần chú ý",
    UrgencyLevel.URGENT: "Khẩn cấp",
    UrgencyLevel.CRITICAL: "Rất khẩn cấp",
}

_URGENCY_ICONS: dict[UrgencyLevel, str] = {
    UrgencyLevel.NORMAL: "🟢",
    UrgencyLevel.ATTENTION: "🟡",
    UrgencyLevel.URGENT: "🟠",
    UrgencyLevel.CRITICAL: "🔴",
}

_URGENCY_DESCRIPTIONS: dict[UrgencyLevel, str] = {
    UrgencyLevel.NORMAL: "Bình thường - Tham vấn thông thường",
    UrgencyLevel.ATTENTION: "Cần chú ý - Có dấu hiệu khó khăn",
    UrgencyLevel.URGENT: "Khẩn cấp - Cần hỗ trợ sớm",
    UrgencyLevel.CRITICAL: "Rất khẩn cấp - Cần can thiệp ngay",
}


class SuicideRisk(StrEnum):
    """Categorical self-harm risk, assessed separately from urgency."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return _SUICIDE_RISK_LABELS[self]


_SUICIDE_RISK_LABELS: dict[SuicideRisk, str] = {
    SuicideRisk.NONE: "Không có",
    SuicideRisk.LOW: "Thấp",
    SuicideRisk.MEDIUM: "Trung bình",
    SuicideRisk.HIGH: "Cao - CẦN CAN THIỆP",
}


class Sender(StrEnum):
    """Author of a conversation message."""

    STUDENT = "student"
    STAFF = "staff"
    SYSTEM = "system/ai"


class StaffRole(StrEnum):
    """Roles eligible to receive escalation notifications."""

    COUNSELOR = "counselor"
    ADMIN = "admin"
