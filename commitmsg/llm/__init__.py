"""LLM provider module for commitmsg.

This module provides a unified interface to multiple LLM providers.
The active provider is configured in ~/.commitmsg/config.yaml.
"""

from dotenv import load_dotenv

import commitmsg.config as _config
from commitmsg.config import LLMProvider
from commitmsg.llm.base import (
    BaseLLMProvider,
    GenerationOptions,
    GenerationResult,
    estimate_cost,
)
from commitmsg.llm.exceptions import MissingAPIKeyError, ProviderError

# Load environment variables from .env file
load_dotenv()


def get_provider(
    provider: LLMProvider | None = None,
    model: str | None = None,
) -> BaseLLMProvider:
    """Get an LLM provider instance.

    Args:
        provider: The provider to use. Defaults to ACTIVE_PROVIDER from config.
        model: The model to use. Defaults to ACTIVE_MODEL when the provider is
            the active one, otherwise the provider's default model.

    Returns:
        An instance of the appropriate LLM provider.

    Raises:
        ValueError: If the provider is not supported.
    """
    if provider is None:
        provider = _config.ACTIVE_PROVIDER
        model = model or _config.ACTIVE_MODEL

    if provider == LLMProvider.OPENAI:
        from commitmsg.llm.openai_provider import OpenAIProvider

        return OpenAIProvider(model=model)

    elif provider == LLMProvider.CLAUDE:
        from commitmsg.llm.claude_provider import ClaudeProvider

        return ClaudeProvider(model=model)

    elif provider == LLMProvider.GEMINI:
        from commitmsg.llm.gemini_provider import GeminiProvider

        return GeminiProvider(model=model)

    elif provider == LLMProvider.GROK:
        from commitmsg.llm.grok_provider import GrokProvider

        return GrokProvider(model=model)

    elif provider == LLMProvider.GROQ:
        from commitmsg.llm.groq_provider import GroqProvider

        return GroqProvider(model=model)

    elif provider == LLMProvider.OLLAMA:
        from commitmsg.llm.ollama_provider import OllamaProvider

        return OllamaProvider(model=model)

    else:
        raise ValueError(f"Unsupported provider: {provider}")


__all__ = [
    "BaseLLMProvider",
    "GenerationOptions",
    "GenerationResult",
    "MissingAPIKeyError",
    "ProviderError",
    "estimate_cost",
    "get_provider",
]
