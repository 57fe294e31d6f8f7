"""Ollama provider implementation for locally served models."""

import os

from commitmsg.config import OLLAMA_BASE_URL, LLMProvider
from commitmsg.llm.openai_provider import OpenAIProvider


class OllamaProvider(OpenAIProvider):
    """Local Ollama server through its OpenAI-compatible endpoint."""

    provider = LLMProvider.OLLAMA
    display_name = "Ollama"

    def __init__(self, model: str | None = None, base_url: str | None = None):
        """Initialize the provider.

        Args:
            model: The local model name.
            base_url: Server URL. Defaults to OLLAMA_HOST or localhost.
        """
        super().__init__(model=model)
        self.base_url = base_url or os.getenv("OLLAMA_HOST", OLLAMA_BASE_URL)

    def get_api_key(self) -> str:
        # Ollama does not authenticate; the SDK still requires a value
        return "ollama"
