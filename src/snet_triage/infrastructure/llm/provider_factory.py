"""
LLM Provider Factory

Creates the text-generation backend selected by configuration.

CONFIGURATION:
    SNET_LLM_PRIMARY_PROVIDER=gemini  # or: openai
"""

from enum import StrEnum
from typing import Optional

from snet_triage.config import get_settings
from snet_triage.config.logging_config import get_logger
from snet_triage.infrastructure.llm.provider import LLMProvider

logger = get_logger(__name__)


class LLMProviderType(StrEnum):
    """Supported LLM provider types."""

    GEMINI = "gemini"
    OPENAI = "openai"


_provider_instances: dict[LLMProviderType, LLMProvider] = {}


def get_llm_provider(
    provider_type: Optional[LLMProviderType] = None,
    force_new: bool = False,
) -> LLMProvider:
    """
    Get LLM provider instance.

    Provider type defaults to SNET_LLM_PRIMARY_PROVIDER. Instances are
    cached per type unless force_new is set.

    Raises:
        ValueError: If unknown provider type
    """
    if provider_type is None:
        provider_type = LLMProviderType(get_settings().llm_primary_provider)

    if not force_new and provider_type in _provider_instances:
        return _provider_instances[provider_type]

    provider = _create_provider(provider_type)

    if not force_new:
        _provider_instances[provider_type] = provider

    logger.info(
        "LLM provider initialized",
        provider=provider_type.value,
        configured=provider.is_configured(),
    )

    return provider


def _create_provider(provider_type: LLMProviderType) -> LLMProvider:
    """Create provider instance by type."""
    if provider_type == LLMProviderType.GEMINI:
        from snet_triage.infrastructure.llm.gemini_provider import GeminiProvider
        return GeminiProvider()

    elif provider_type == LLMProviderType.OPENAI:
        from snet_triage.infrastructure.llm.openai_provider import OpenAIProvider
        return OpenAIProvider()

    else:
        raise ValueError(f"Unknown provider type: {provider_type}")


def clear_provider_cache() -> None:
    """Clear cached provider instances (for testing)."""
    _provider_instances.clear()
