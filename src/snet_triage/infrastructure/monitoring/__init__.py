"""Monitoring infrastructure package."""

from snet_triage.infrastructure.monitoring.sentry_integration import (
    init_sentry,
    set_conversation_context,
    capture_escalation_event,
    capture_exception_with_context,
)

__all__ = [
    "init_sentry",
    "set_conversation_context",
    "capture_escalation_event",
    "capture_exception_with_context",
]
