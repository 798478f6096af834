"""
LLM provider abstraction.

Provides a provider-agnostic, single-call interface over the Gemini, OpenAI and
Anthropic SDKs. Providers never retry on their own; retry policy lives in
GenerationClient so it is identical across providers.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from tailor.config import ProviderConfig
from tailor.exceptions import ProviderNotConfiguredError

MAX_OUTPUT_TOKENS = 8192


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int


class LLMProvider(ABC):
    """
    Abstract base for LLM providers.

    Subclasses must:
    - Set _provider_prefix class attribute (e.g., "gemini", "openai")
    - Implement _call_api() for the actual API call
    - Call update_model(model) in __init__ to set model and name
    """

    _provider_prefix: str

    name: str
    model: str

    def update_model(self, model: str):
        """Update the model and refresh the provider name."""
        self.model = model
        self.name = f"{self._provider_prefix}/{model}"

    @abstractmethod
    def _call_api(self, prompt: str) -> LLMResponse:
        """Make a single API call (no retries). Implemented by subclasses."""
        pass

    def generate(self, prompt: str) -> LLMResponse:
        """Generate one completion. Errors propagate unchanged for retry classification."""
        return self._call_api(prompt)


def _require_key(config: ProviderConfig) -> str:
    if not config.api_key:
        raise ProviderNotConfiguredError(
            f"{config.provider} API key not configured. "
            f"Set {config.provider.upper()}_API_KEY in .env"
        )
    return config.api_key


class GeminiProvider(LLMProvider):
    """Google Gemini provider (google-genai SDK)."""

    _provider_prefix = "gemini"

    def __init__(self, config: ProviderConfig):
        api_key = _require_key(config)

        # Lazy import - only load the SDK if this provider is used
        from google import genai

        self.client = genai.Client(api_key=api_key)
        self.update_model(config.model_id or "gemini-2.0-flash")

    def _call_api(self, prompt: str) -> LLMResponse:
        response = self.client.models.generate_content(model=self.model, contents=prompt)
        usage = getattr(response, "usage_metadata", None)
        return LLMResponse(
            content=response.text or "",
            model=self.model,
            input_tokens=(getattr(usage, "prompt_token_count", None) or 0),
            output_tokens=(getattr(usage, "candidates_token_count", None) or 0),
        )


class OpenAIProvider(LLMProvider):
    """OpenAI GPT provider."""

    _provider_prefix = "openai"

    def __init__(self, config: ProviderConfig):
        api_key = _require_key(config)
        try:
            import openai
        except ImportError:
            raise ImportError(
                "openai package required. Install with: pip install resume-tailor[openai]"
            ) from None

        self.client = openai.OpenAI(api_key=api_key, max_retries=0)
        self.update_model(config.model_id or "gpt-4o")

    def _call_api(self, prompt: str) -> LLMResponse:
        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=MAX_OUTPUT_TOKENS,
            messages=[{"role": "user", "content": prompt}],
        )
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=self.model,
            input_tokens=response.usage.prompt_tokens,
            output_tokens=response.usage.completion_tokens,
        )


class AnthropicProvider(LLMProvider):
    """Anthropic Claude provider."""

    _provider_prefix = "anthropic"

    def __init__(self, config: ProviderConfig):
        api_key = _require_key(config)
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "anthropic package required. Install with: pip install resume-tailor[anthropic]"
            ) from None

        self.client = anthropic.Anthropic(api_key=api_key, max_retries=0)
        self.update_model(config.model_id or "claude-sonnet-4-20250514")

    def _call_api(self, prompt: str) -> LLMResponse:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=MAX_OUTPUT_TOKENS,
            messages=[{"role": "user", "content": prompt}],
        )
        return LLMResponse(
            content=response.content[0].text,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )


PROVIDERS = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
}


def get_provider(config: ProviderConfig) -> LLMProvider:
    """
    Get an LLM provider instance.

    Args:
        config: Provider name, API key and model

    Returns:
        LLMProvider instance

    Raises:
        ProviderNotConfiguredError: Unknown provider or missing API key
    """
    provider_class = PROVIDERS.get(config.provider)
    if provider_class is None:
        raise ProviderNotConfiguredError(
            f"Unknown provider: {config.provider}. Use one of: {', '.join(PROVIDERS)}"
        )
    return provider_class(config)
