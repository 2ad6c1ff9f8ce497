"""Metrics infrastructure package."""

from snet_triage.infrastructure.metrics.prometheus_metrics import (
    # Triage metrics
    TRIAGE_MESSAGES_SENT,
    TRIAGE_COMPLETIONS_TOTAL,
    TRIAGE_HALTS_TOTAL,
    TRIAGE_PERSISTENCE_FAILURES,
    # Classifier metrics
    CLASSIFICATIONS_TOTAL,
    CLASSIFIER_LATENCY,
    LLM_TOKENS_USED,
    # Escalation metrics
    ESCALATION_EVENTS_TOTAL,
    NOTIFICATIONS_TOTAL,
    APPOINTMENTS_TOTAL,
    # Helpers
    track_triage_message,
    track_triage_completion,
    track_triage_halt,
    track_classification,
    track_classifier_call,
    track_escalation,
    track_notification,
    track_appointment,
    update_system_info,
    # Router
    metrics_router,
)

__all__ = [
    "TRIAGE_MESSAGES_SENT",
    "TRIAGE_COMPLETIONS_TOTAL",
    "TRIAGE_HALTS_TOTAL",
    "TRIAGE_PERSISTENCE_FAILURES",
    "CLASSIFICATIONS_TOTAL",
    "CLASSIFIER_LATENCY",
    "LLM_TOKENS_USED",
    "ESCALATION_EVENTS_TOTAL",
    "NOTIFICATIONS_TOTAL",
    "APPOINTMENTS_TOTAL",
    "track_triage_message",
    "track_triage_completion",
    "track_triage_halt",
    "track_classification",
    "track_classifier_call",
    "track_escalation",
    "track_notification",
    "track_appointment",
    "update_system_info",
    "metrics_router",
]
