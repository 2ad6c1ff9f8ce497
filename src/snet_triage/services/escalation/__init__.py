"""Escalation notices and staff notification fan-out."""

from snet_triage.services.escalation.escalation_dispatcher import (
    EscalationDispatcher,
    NotificationCategory,
)

__all__ = ["EscalationDispatcher", "NotificationCategory"]
