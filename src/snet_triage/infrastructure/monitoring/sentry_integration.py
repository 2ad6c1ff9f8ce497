"""
Sentry Error Tracking Integration

Error tracking with sensitive data scrubbing. Events are correlated
with conversation IDs; message text never leaves the service.

PRIVACY: Student message content, issues text and email addresses
are stripped before anything is sent to Sentry.
"""

import re
from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from snet_triage.config.logging_config import get_logger

logger = get_logger(__name__)

SENSITIVE_PATTERNS = [
    r"password[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"api[_-]?key[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"token[\"']?\s*[:=]\s*[\"']?[^\"'\s,}]+",
    r"bearer\s+[a-zA-Z0-9\-._~+/]+=*",
    r"[\w.+-]+@[\w-]+\.[\w.-]+",
]

SENSITIVE_KEYS = frozenset({
    "password",
    "token",
    "secret",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "content",
    "issues",
    "email",
    "full_name",
})


def _scrub_string(value: str) -> str:
    result = value
    for pattern in SENSITIVE_PATTERNS:
        result = re.sub(pattern, "[REDACTED]", result, flags=re.IGNORECASE)
    return result


def _scrub_dict(data: dict) -> dict:
    """Recursively scrub sensitive data from dictionary."""
    result = {}
    for key, value in data.items():
        key_lower = str(key).lower().replace("-", "_")

        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            result[key] = "[REDACTED]"
        elif isinstance(value, dict):
            result[key] = _scrub_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _scrub_dict(item) if isinstance(item, dict)
                else _scrub_string(item) if isinstance(item, str)
                else item
                for item in value
            ]
        elif isinstance(value, str):
            result[key] = _scrub_string(value)
        else:
            result[key] = value

    return result


def before_send(event: dict, hint: dict) -> Optional[dict]:
    """Scrub request bodies, breadcrumbs and extra context."""
    if "request" in event:
        if isinstance(event["request"].get("data"), dict):
            event["request"]["data"] = _scrub_dict(event["request"]["data"])
        elif "data" in event["request"]:
            event["request"]["data"] = "[REDACTED]"
        if "headers" in event["request"]:
            event["request"]["headers"] = _scrub_dict(event["request"]["headers"])

    if "breadcrumbs" in event:
        for breadcrumb in event.get("breadcrumbs", {}).get("values", []):
            if isinstance(breadcrumb.get("data"), dict):
                breadcrumb["data"] = _scrub_dict(breadcrumb["data"])

    if "extra" in event:
        event["extra"] = _scrub_dict(event["extra"])

    return event


def before_breadcrumb(breadcrumb: dict, hint: dict) -> Optional[dict]:
    # SQL parameters may carry message text
    if breadcrumb.get("category") == "sql" and "message" in breadcrumb:
        breadcrumb["message"] = _scrub_string(breadcrumb["message"])
        breadcrumb.pop("data", None)

    return breadcrumb


def init_sentry(
    dsn: str,
    environment: str = "development",
    release: str = "snet-triage@0.1.0",
    traces_sample_rate: float = 0.1,
) -> None:
    """
    Initialize Sentry error tracking.

    Args:
        dsn: Sentry DSN; empty disables tracking
        environment: Environment name
        release: Release version
        traces_sample_rate: Performance tracing rate
    """
    if not dsn:
        logger.warning("Sentry DSN not configured, error tracking disabled")
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=traces_sample_rate,
        before_send=before_send,
        before_breadcrumb=before_breadcrumb,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            AsyncioIntegration(),
            LoggingIntegration(level=None, event_level=None),
        ],
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    logger.info(
        "Sentry initialized",
        environment=environment,
        release=release,
    )


def set_conversation_context(conversation_id: str, phase: Optional[str] = None) -> None:
    """Attach the conversation being processed to subsequent events."""
    sentry_sdk.set_context("conversation", {
        "conversation_id": conversation_id,
        "phase": phase,
    })


def capture_escalation_event(
    conversation_id: str,
    urgency_level: int,
    source: str = "chat",
) -> None:
    """
    Record an escalation for monitoring.

    Level 3 is reported as an error so it pages on-call dashboards.
    """
    with sentry_sdk.new_scope() as scope:
        scope.set_tag("category", "escalation")
        scope.set_tag("source", source)
        scope.set_extra("conversation_id", conversation_id)
        scope.set_extra("urgency_level", urgency_level)
        level = "error" if urgency_level >= 3 else "warning"
        sentry_sdk.capture_message(f"Triage escalation level {urgency_level}", level=level)


def capture_exception_with_context(
    exception: Exception,
    conversation_id: Optional[str] = None,
    extra: Optional[dict] = None,
) -> Optional[str]:
    """
    Capture exception with additional context.

    Returns: Sentry event ID
    """
    with sentry_sdk.new_scope() as scope:
        if conversation_id:
            scope.set_tag("conversation_id", conversation_id)
        if extra:
            for key, value in _scrub_dict(extra).items():
                scope.set_extra(key, value)

        return sentry_sdk.capture_exception(exception)
