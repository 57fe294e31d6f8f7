"""Anthropic Claude provider implementation."""

from anthropic import Anthropic

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


class ClaudeProvider(BaseLLMProvider):
    """Anthropic Claude LLM provider."""

    def __init__(self, model: str | None = None):
        """Initialize the Claude provider.

        Args:
            model: The model to use. Defaults to claude-sonnet-4.
        """
        self.model = model or DEFAULT_MODELS[LLMProvider.CLAUDE]
        self.api_key_env_var = get_api_key_env_var(LLMProvider.CLAUDE)

    def name(self) -> LLMProvider:
        return LLMProvider.CLAUDE

    def get_api_key(self) -> str:
        """Get the Claude API key from environment or credentials file.

        Raises:
            MissingAPIKeyError: If CLAUDE_API_KEY is not found.
        """
        return self._get_api_key_with_fallback(self.api_key_env_var, "Claude")

    def generate(
        self,
        ctx: GenerationContext,
        changes: str,
        options: GenerationOptions,
    ) -> GenerationResult:
        """Generate a commit message using Anthropic Claude.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ProviderError: For other API errors.
            GenerationCancelled: If ctx is done before the call returns.
        """
        client = Anthropic(api_key=self.get_api_key(), **self._client_timeout_kwargs(ctx))
        user_prompt = self.build_user_prompt(changes, options)
        ctx.raise_if_cancelled()

        try:
            message = self._run_cancellable(ctx, lambda: client.messages.create(
                model=self.model,
                max_tokens=_config.MAX_TOKENS,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": user_prompt}],
            ))
            raw_response = message.content[0].text
            input_tokens = message.usage.input_tokens
            output_tokens = message.usage.output_tokens
        except GenerationCancelled:
            raise
        except Exception as e:
            raise ProviderError(f"Claude API call failed: {e}")

        usage = TokenUsage(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )
        return GenerationResult(
            message=clean_message(raw_response),
            model=self.model,
            usage=usage,
            cost=estimate_cost(self.model, usage),
        )
