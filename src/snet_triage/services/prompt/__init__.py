"""Prompt construction package."""

from snet_triage.services.prompt.prompt_builder import AssessmentPromptBuilder, BuiltPrompt

__all__ = ["AssessmentPromptBuilder", "BuiltPrompt"]
