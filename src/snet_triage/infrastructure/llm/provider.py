"""
LLM Provider Abstract Interface

Defines the contract for text-generation backends used by the
risk classifier. Enables swapping providers without changing
service code.

ARCHITECTURE: Providers perform exactly one request per call.
Retries are not performed here; callers apply their own default.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from snet_triage.services.prompt.prompt_builder import BuiltPrompt


@dataclass
class LLMResponse:
    """
    Response from LLM provider.

    Attributes:
        content: Generated text (raw, may wrap a JSON payload in prose)
        finish_reason: Why generation stopped
        usage: Token usage statistics
        model: Model identifier used
        provider: Provider name
        latency_ms: Response time in milliseconds
        raw_response: Original API response (for debugging)
    """

    content: str
    finish_reason: str = "stop"
    usage: dict = field(default_factory=dict)
    model: str = ""
    provider: str = ""
    latency_ms: int = 0
    raw_response: Optional[Any] = None

    @property
    def total_tokens(self) -> int:
        return self.usage.get("total_tokens", 0)

    def to_dict(self) -> dict:
        """Serialize to dictionary (excluding raw_response)."""
        return {
            "content": self.content,
            "finish_reason": self.finish_reason,
            "usage": self.usage,
            "model": self.model,
            "provider": self.provider,
            "latency_ms": self.latency_ms,
        }


class LLMProvider(ABC):
    """
    Abstract text-generation provider.

    Request contract: instruction + context text, sampling temperature,
    output length cap, and a permissive content-safety policy suited to
    clinical conversations about self-harm.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get provider name for logging/tracking."""
        pass

    @property
    @abstractmethod
    def default_model(self) -> str:
        pass

    @abstractmethod
    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate completion from prompt.

        Raises:
            LLMProviderError: On transport failure or non-success response
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """True if API key and settings are configured."""
        pass


class LLMProviderError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(
        self,
        message: str,
        provider: str,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.original_error = original_error


class RateLimitError(LLMProviderError):
    """Rate limit or quota exceeded."""

    def __init__(self, provider: str) -> None:
        super().__init__(f"Rate limit exceeded for {provider}", provider=provider)


class ContentFilterError(LLMProviderError):
    """Content was blocked by the provider's safety systems."""

    def __init__(self, provider: str, filter_reason: str = "") -> None:
        super().__init__(
            f"Content filtered by {provider}: {filter_reason}",
            provider=provider,
        )
        self.filter_reason = filter_reason
