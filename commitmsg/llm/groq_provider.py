"""Groq provider implementation."""

from groq import Groq

import commitmsg.config as _config
from commitmsg.config import DEFAULT_MODELS, LLMProvider, get_api_key_env_var
from commitmsg.context import GenerationContext
from commitmsg.exceptions import GenerationCancelled
from commitmsg.llm.base import (
    BaseLLMProvider,
    GenerationOptions,
    GenerationResult,
    clean_message,
    estimate_cost,
)
from commitmsg.llm.exceptions import ProviderError
from commitmsg.llm.prompts import SYSTEM_PROMPT
from commitmsg.usage.models import TokenUsage


class GroqProvider(BaseLLMProvider):
    """Groq LLM provider (fast inference for open-source models)."""

    def __init__(self, model: str | None = None):
        """Initialize the Groq provider.

        Args:
            model: The model to use. Defaults to llama-3.3-70b-versatile.
        """
        self.model = model or DEFAULT_MODELS[LLMProvider.GROQ]
        self.api_key_env_var = get_api_key_env_var(LLMProvider.GROQ)

    def name(self) -> LLMProvider:
        return LLMProvider.GROQ

    def get_api_key(self) -> str:
        """Get the Groq API key from environment or credentials file.

        Raises:
            MissingAPIKeyError: If GROQ_API_KEY is not found.
        """
        return self._get_api_key_with_fallback(self.api_key_env_var, "Groq")

    def generate(
        self,
        ctx: GenerationContext,
        changes: str,
        options: GenerationOptions,
    ) -> GenerationResult:
        """Generate a commit message using Groq.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ProviderError: For other API errors.
            GenerationCancelled: If ctx is done before the call returns.
        """
        client = Groq(api_key=self.get_api_key(), **self._client_timeout_kwargs(ctx))
        user_prompt = self.build_user_prompt(changes, options)
        ctx.raise_if_cancelled()

        try:
            # Call the Groq API (OpenAI-compatible)
            response = self._run_cancellable(ctx, lambda: client.chat.completions.create(
                model=self.model,
                max_tokens=_config.MAX_TOKENS,
                temperature=_config.TEMPERATURE,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
            ))
            raw_response = response.choices[0].message.content
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        except GenerationCancelled:
            raise
        except Exception as e:
            raise ProviderError(f"Groq API call failed: {e}")

        return GenerationResult(
            message=clean_message(raw_response),
            model=self.model,
            usage=usage,
            cost=estimate_cost(self.model, usage),
        )
