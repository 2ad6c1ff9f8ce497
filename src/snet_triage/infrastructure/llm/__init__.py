"""LLM provider abstraction package."""

from snet_triage.infrastructure.llm.provider import (
    ContentFilterError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from snet_triage.infrastructure.llm.provider_factory import (
    LLMProviderType,
    clear_provider_cache,
    get_llm_provider,
)

__all__ = [
    # Base types
    "LLMProvider",
    "LLMResponse",
    "LLMProviderError",
    "RateLimitError",
    "ContentFilterError",
    # Factory
    "get_llm_provider",
    "LLMProviderType",
    "clear_provider_cache",
]
