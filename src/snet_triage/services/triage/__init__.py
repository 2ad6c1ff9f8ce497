"""Automated triage: response parsing, classification and conversation sequencing."""
