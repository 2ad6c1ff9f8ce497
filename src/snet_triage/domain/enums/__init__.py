"""Domain enumerations."""

from snet_triage.domain.enums.urgency import Sender, StaffRole, SuicideRisk, UrgencyLevel

__all__ = ["Sender", "StaffRole", "SuicideRisk", "UrgencyLevel"]
