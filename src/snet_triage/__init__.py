"""
S-Net Triage - Automated pre-counselor triage engine

This package provides the backend services that converse with a student
before a human counselor is available, extract a structured risk
assessment from the conversation, and escalate when risk is elevated.

IMPORTANT: This is a safety-critical system. Urgency classification
always degrades to a safe default when the text-generation backend
is unavailable.
"""

__version__ = "0.1.0"
__author__ = "S-Net Engineering Team"
