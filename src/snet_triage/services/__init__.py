"""Business services (triage, escalation, appointments)."""
