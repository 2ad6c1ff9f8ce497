"""
Google Gemini LLM Provider

Gemini Flash backend for risk classification.

SAFETY: Content-safety thresholds are permissive because student
messages legitimately discuss self-harm; blocking them would hide
exactly the conversations that need escalation.
"""

import time
from typing import Optional

import google.generativeai as genai
from google.generativeai.types import GenerationConfig, HarmBlockThreshold, HarmCategory

from snet_triage.config import get_settings
from snet_triage.config.logging_config import get_logger
from snet_triage.infrastructure.llm.provider import (
    ContentFilterError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from snet_triage.services.prompt.prompt_builder import BuiltPrompt

logger = get_logger(__name__)


class GeminiProvider(LLMProvider):
    """
    Google Gemini API provider.

    Usage:
        provider = GeminiProvider()
        response = await provider.generate(prompt)
    """

    DEFAULT_MODEL = "gemini-1.5-flash"

    SAFETY_SETTINGS = {
        HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
        HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
        HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
        HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
    }

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
    ) -> None:
        """
        Initialize Gemini provider.

        Args:
            api_key: Gemini API key (defaults to SNET_GEMINI_API_KEY)
            model: Model identifier (defaults to settings)
        """
        settings = get_settings()

        self._api_key = api_key or settings.gemini.api_key.get_secret_value()
        self._default_model = model or settings.gemini.model or self.DEFAULT_MODEL
        self._configured = False

        if self._api_key:
            genai.configure(api_key=self._api_key)
            self._configured = True

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        return self._configured

    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Generate completion using Gemini.

        Args:
            prompt: Built prompt
            model: Model override
            max_tokens: Max tokens override
            temperature: Temperature override

        Returns:
            LLMResponse with the raw completion text
        """
        if not self.is_configured():
            raise LLMProviderError(
                "Gemini API key not configured",
                provider=self.provider_name,
            )

        model_name = model or self._default_model
        gemini_model = genai.GenerativeModel(
            model_name=model_name,
            safety_settings=self.SAFETY_SETTINGS,
            system_instruction=prompt.system_prompt,
        )

        generation_config = GenerationConfig(
            max_output_tokens=max_tokens or prompt.max_tokens,
            temperature=temperature if temperature is not None else prompt.temperature,
        )

        start_time = time.time()

        try:
            response = await gemini_model.generate_content_async(
                prompt.user_message,
                generation_config=generation_config,
            )
        except Exception as e:
            self._handle_error(e)

        latency_ms = int((time.time() - start_time) * 1000)

        if response.prompt_feedback:
            block_reason = getattr(response.prompt_feedback, "block_reason", None)
            if block_reason:
                raise ContentFilterError(
                    provider=self.provider_name,
                    filter_reason=str(block_reason),
                )

        content = ""
        if response.candidates:
            candidate = response.candidates[0]
            if candidate.content and candidate.content.parts:
                content = "".join(part.text or "" for part in candidate.content.parts)

        # Gemini doesn't report exact usage; estimate from word counts
        input_tokens = int(len(prompt.full_prompt.split()) * 1.3)
        output_tokens = int(len(content.split()) * 1.3)

        logger.debug(
            "Gemini completion generated",
            model=model_name,
            latency_ms=latency_ms,
            content_length=len(content),
        )

        return LLMResponse(
            content=content,
            usage={
                "prompt_tokens": input_tokens,
                "completion_tokens": output_tokens,
                "total_tokens": input_tokens + output_tokens,
            },
            model=model_name,
            provider=self.provider_name,
            latency_ms=latency_ms,
            raw_response=response,
        )

    def _handle_error(self, error: Exception) -> None:
        """Translate SDK errors into provider errors."""
        error_msg = str(error).lower()

        if "quota" in error_msg or "rate" in error_msg or "429" in error_msg:
            logger.warning("Gemini rate limit", error=str(error))
            raise RateLimitError(provider=self.provider_name) from error

        if "safety" in error_msg or "blocked" in error_msg:
            raise ContentFilterError(
                provider=self.provider_name,
                filter_reason=str(error),
            ) from error

        logger.error("Gemini API error", error=str(error))
        raise LLMProviderError(
            f"Gemini error: {error}",
            provider=self.provider_name,
            original_error=error,
        ) from error

    async def health_check(self) -> bool:
        """Check Gemini availability."""
        if not self.is_configured():
            return False

        try:
            for _ in genai.list_models():
                break
            return True
        except Exception as e:
            logger.warning("Gemini health check failed", error=str(e))
            return False
