"""Unit Tests for Text-Generation Backend Selection"""

import pytest

from snet_triage.infrastructure.llm import LLMProviderType, clear_provider_cache, get_llm_provider
from snet_triage.infrastructure.llm.gemini_provider import GeminiProvider
from snet_triage.infrastructure.llm.openai_provider import OpenAIProvider
from snet_triage.services.triage.risk_classifier import RiskClassifier


@pytest.fixture(autouse=True)
def fresh_cache():
    clear_provider_cache()
    yield
    clear_provider_cache()


class TestProviderFactory:

    def test_instances_cached_per_type(self) -> None:
        first = get_llm_provider(LLMProviderType.OPENAI)
        assert get_llm_provider(LLMProviderType.OPENAI) is first
        assert isinstance(first, OpenAIProvider)

    def test_force_new_bypasses_cache(self) -> None:
        cached = get_llm_provider(LLMProviderType.GEMINI)
        fresh = get_llm_provider(LLMProviderType.GEMINI, force_new=True)
        assert fresh is not cached
        assert get_llm_provider(LLMProviderType.GEMINI) is cached

    def test_explicit_key_configures_backend(self) -> None:
        assert GeminiProvider(api_key="test-key").is_configured()
        assert OpenAIProvider(api_key="test-key").is_configured()

    async def test_unconfigured_backend_yields_no_assessment(self) -> None:
        provider = GeminiProvider(api_key="")
        provider._configured = False
        classifier = RiskClassifier(provider)

        assert await classifier.classify(["Tôi buồn"]) is None
