"""xAI Grok provider implementation (OpenAI-compatible API)."""

from commitmsg.config import GROK_BASE_URL, LLMProvider
from commitmsg.llm.openai_provider import OpenAIProvider


class GrokProvider(OpenAIProvider):
    """xAI Grok LLM provider."""

    provider = LLMProvider.GROK
    display_name = "Grok"
    base_url = GROK_BASE_URL
