"""
Classifier Response Parser

Extracts a structured assessment from raw backend text. Backends
frequently wrap the JSON object in prose or markdown fences, emit
urgency as a string, or omit fields entirely; every such case is
normalized here.

SAFETY-CRITICAL: The urgency level returned is always within 0-3.
Parsing never raises; unusable output yields None.
"""

import json
import re
from typing import Any, Optional

from snet_triage.config.logging_config import get_logger
from snet_triage.domain.enums.urgency import SuicideRisk, UrgencyLevel
from snet_triage.domain.models.assessment import Assessment

logger = get_logger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?)0*(\d+)")

# Longer digit runs are clamped without int() conversion
_MAX_URGENCY_DIGITS = 3


def extract_json_object(text: str) -> Optional[str]:
    """
    Find the first balanced {...} span in text, in a single pass.

    Braces inside JSON string literals are ignored; quotes in the
    surrounding prose are not treated as strings. When an opening
    brace is never closed, the earliest-opening balanced span inside
    it is returned instead.
    """
    open_positions: list[int] = []
    best: Optional[tuple[int, int]] = None
    in_string = False
    escaped = False

    for pos, char in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"' and open_positions:
            in_string = True
        elif char == "{":
            open_positions.append(pos)
        elif char == "}" and open_positions:
            start = open_positions.pop()
            if not open_positions:
                return text[start:pos + 1]
            if best is None or start < best[0]:
                best = (start, pos)

    if best is None:
        return None
    return text[best[0]:best[1] + 1]


def coerce_urgency(value: Any) -> UrgencyLevel:
    """
    Coerce a raw urgency value into the 0-3 scale.

    Integers and integral floats are clamped; strings contribute their
    leading integer ("2", "2 - urgent"); anything else is level 0.
    """
    if isinstance(value, bool):
        return UrgencyLevel.NORMAL
    if isinstance(value, int):
        return UrgencyLevel.coerce(value)
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return UrgencyLevel.NORMAL
        return UrgencyLevel.coerce(int(value))
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            sign, digits = match.groups()
            if len(digits) > _MAX_URGENCY_DIGITS:
                return UrgencyLevel.NORMAL if sign == "-" else UrgencyLevel.CRITICAL
            return UrgencyLevel.coerce(int(sign + digits))
    return UrgencyLevel.NORMAL


def _coerce_risk(value: Any) -> SuicideRisk:
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in SuicideRisk._value2member_map_:
            return SuicideRisk(normalized)
    return SuicideRisk.NONE


def _coerce_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(
        item.strip() for item in value
        if isinstance(item, str) and item.strip()
    )


def _coerce_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def parse_assessment(raw: Optional[str]) -> Optional[Assessment]:
    """
    Parse backend output into an Assessment.

    Args:
        raw: Raw completion text

    Returns:
        Assessment, or None when no JSON object can be recovered
    """
    if not raw:
        logger.warning("Classifier returned empty output")
        return None

    candidate = extract_json_object(raw)
    if candidate is None:
        logger.warning("No JSON object in classifier output", output_length=len(raw))
        return None

    # ValueError covers JSONDecodeError and oversized integer literals
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError) as e:
        logger.warning(
            "Malformed JSON in classifier output",
            error_type=type(e).__name__,
            output_length=len(raw),
        )
        return None

    if not isinstance(data, dict):
        return None

    urgency = coerce_urgency(data.get("urgencyLevel"))
    summary = _coerce_text(data.get("summary")) or _coerce_text(data.get("reasoning"))
    priority_note = _coerce_text(data.get("priorityNote")) if urgency.is_escalation else ""

    return Assessment(
        urgency_level=urgency,
        suicide_risk=_coerce_risk(data.get("suicideRisk")),
        main_issues=_coerce_list(data.get("mainIssues")),
        risk_factors=_coerce_list(data.get("riskFactors")),
        protective_factors=_coerce_list(data.get("protectiveFactors")),
        behavioral_indicators=_coerce_list(data.get("behavioralIndicators")),
        emotional_state=_coerce_text(data.get("emotionalState")),
        recommended_approach=_coerce_text(data.get("recommendedApproach")),
        summary=summary,
        priority_note=priority_note,
    )
