"""OpenAI GPT provider implementation."""

from openai import OpenAI

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


class OpenAIProvider(BaseLLMProvider):
    """OpenAI GPT LLM provider."""

    provider = LLMProvider.OPENAI
    display_name = "OpenAI"
    base_url: str | None = None

    def __init__(self, model: str | None = None):
        """Initialize the provider.

        Args:
            model: The model to use. Defaults to the provider's first listed model.
        """
        self.model = model or DEFAULT_MODELS[self.provider]

    def name(self) -> LLMProvider:
        return self.provider

    def get_api_key(self) -> str:
        """Get the API key from environment or credentials file.

        Raises:
            MissingAPIKeyError: If the key is not found.
        """
        return self._get_api_key_with_fallback(get_api_key_env_var(self.provider), self.display_name)

    def _create_client(self, ctx: GenerationContext) -> OpenAI:
        kwargs = self._client_timeout_kwargs(ctx)
        if self.base_url:
            kwargs["base_url"] = self.base_url
        return OpenAI(api_key=self.get_api_key(), **kwargs)

    def generate(
        self,
        ctx: GenerationContext,
        changes: str,
        options: GenerationOptions,
    ) -> GenerationResult:
        """Generate a commit message using the chat completions API.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ProviderError: For other API errors.
            GenerationCancelled: If ctx is done before the call returns.
        """
        client = self._create_client(ctx)
        user_prompt = self.build_user_prompt(changes, options)
        ctx.raise_if_cancelled()

        try:
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
            usage = None
            if response.usage is not None:
                usage = TokenUsage(
                    prompt_tokens=response.usage.prompt_tokens,
                    completion_tokens=response.usage.completion_tokens,
                    total_tokens=response.usage.total_tokens,
                )
        except GenerationCancelled:
            raise
        except Exception as e:
            raise ProviderError(f"{self.display_name} API call failed: {e}")

        return GenerationResult(
            message=clean_message(raw_response),
            model=self.model,
            usage=usage,
            cost=estimate_cost(self.model, usage),
        )
