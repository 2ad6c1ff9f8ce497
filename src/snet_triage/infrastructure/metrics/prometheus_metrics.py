"""
Prometheus Metrics

Triage observability for S-Net. Exposed at /metrics for scraping.

ARCHITECTURE: Metrics are decoupled from business logic.
Only increment/observe; never block on metrics operations.
"""

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    Counter,
    Histogram,
    Info,
    generate_latest,
)
from fastapi import APIRouter, Response

from snet_triage.config.logging_config import get_logger

logger = get_logger(__name__)

# =============================================================================
# TRIAGE METRICS
# =============================================================================

TRIAGE_MESSAGES_SENT = Counter(
    "snet_triage_messages_sent_total",
    "Automated triage messages appended to conversations",
    ["kind"],  # welcome, question, closing, escalation
)

TRIAGE_COMPLETIONS_TOTAL = Counter(
    "snet_triage_completions_total",
    "Triage analyses completed by stored urgency level",
    ["urgency_level"],
)

TRIAGE_HALTS_TOTAL = Counter(
    "snet_triage_halts_total",
    "Triage conversations halted by a staff reply",
    ["phase"],
)

TRIAGE_PERSISTENCE_FAILURES = Counter(
    "snet_triage_persistence_failures_total",
    "Failed atomic urgency + completion writes",
)

# =============================================================================
# CLASSIFIER METRICS
# =============================================================================

CLASSIFICATIONS_TOTAL = Counter(
    "snet_classifications_total",
    "Risk classification attempts by outcome",
    ["source", "outcome"],  # chat/appointment/transcript x success/unavailable/malformed
)

CLASSIFIER_LATENCY = Histogram(
    "snet_classifier_latency_seconds",
    "Backend latency of risk classification",
    ["provider"],
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0],
)

LLM_TOKENS_USED = Counter(
    "snet_llm_tokens_total",
    "Tokens used by the classification backend",
    ["provider", "type"],  # input, output
)

# =============================================================================
# ESCALATION METRICS
# =============================================================================

ESCALATION_EVENTS_TOTAL = Counter(
    "snet_escalation_events_total",
    "Escalation events by urgency level",
    ["urgency_level"],
)

NOTIFICATIONS_TOTAL = Counter(
    "snet_notifications_total",
    "Staff notifications by category and delivery status",
    ["category", "status"],  # sent, failed
)

APPOINTMENTS_TOTAL = Counter(
    "snet_appointments_total",
    "Appointment requests stored by urgency level",
    ["urgency_level"],
)

# =============================================================================
# SYSTEM INFO
# =============================================================================

SYSTEM_INFO = Info(
    "snet_system",
    "S-Net triage service information",
)

SYSTEM_INFO.info({
    "version": "0.1.0",
    "environment": "development",  # Updated at runtime
})


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def track_triage_message(kind: str) -> None:
    TRIAGE_MESSAGES_SENT.labels(kind=kind).inc()


def track_triage_completion(urgency_level: int) -> None:
    """Record a completed triage analysis."""
    TRIAGE_COMPLETIONS_TOTAL.labels(urgency_level=str(urgency_level)).inc()


def track_triage_halt(phase: str) -> None:
    TRIAGE_HALTS_TOTAL.labels(phase=phase).inc()


def track_classification(source: str, outcome: str) -> None:
    """Record a classification attempt outcome."""
    CLASSIFICATIONS_TOTAL.labels(source=source, outcome=outcome).inc()


def track_classifier_call(provider: str, duration_seconds: float, usage: dict) -> None:
    """Record backend latency and token usage."""
    CLASSIFIER_LATENCY.labels(provider=provider).observe(duration_seconds)
    LLM_TOKENS_USED.labels(provider=provider, type="input").inc(usage.get("prompt_tokens", 0))
    LLM_TOKENS_USED.labels(provider=provider, type="output").inc(
        usage.get("completion_tokens", 0)
    )


def track_escalation(urgency_level: int) -> None:
    """Record escalation event."""
    ESCALATION_EVENTS_TOTAL.labels(urgency_level=str(urgency_level)).inc()


def track_notification(category: str, status: str) -> None:
    NOTIFICATIONS_TOTAL.labels(category=category, status=status).inc()


def track_appointment(urgency_level: int) -> None:
    APPOINTMENTS_TOTAL.labels(urgency_level=str(urgency_level)).inc()


# =============================================================================
# METRICS ENDPOINT
# =============================================================================

metrics_router = APIRouter(tags=["metrics"])


@metrics_router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format for scraping.
    """
    return Response(
        content=generate_latest(REGISTRY),
        media_type=CONTENT_TYPE_LATEST,
    )


def update_system_info(environment: str, version: str = "0.1.0") -> None:
    """Update system info metric with current environment."""
    SYSTEM_INFO.info({
        "version": version,
        "environment": environment,
    })
