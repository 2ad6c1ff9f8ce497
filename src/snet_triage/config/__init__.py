"""
S-Net Configuration Module

Provides centralized configuration management with:
- Environment-based settings loading
- Immutable triage script and pacing configuration
- Secure handling of secrets
"""

from snet_triage.config.settings import Settings, get_settings
from snet_triage.config.triage_script import TriagePacing, TriageScript

__all__ = ["Settings", "get_settings", "TriagePacing", "TriageScript"]
