"""Google Gemini provider implementation."""

from google import genai
from google.genai import types

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


class GeminiProvider(BaseLLMProvider):
    """Google Gemini LLM provider."""

    def __init__(self, model: str | None = None):
        """Initialize the Gemini provider.

        Args:
            model: The model to use. Defaults to gemini-2.0-flash.
        """
        self.model = model or DEFAULT_MODELS[LLMProvider.GEMINI]
        self.api_key_env_var = get_api_key_env_var(LLMProvider.GEMINI)

    def name(self) -> LLMProvider:
        return LLMProvider.GEMINI

    def get_api_key(self) -> str:
        """Get the Gemini API key from environment or credentials file.

        Raises:
            MissingAPIKeyError: If GEMINI_API_KEY is not found.
        """
        return self._get_api_key_with_fallback(self.api_key_env_var, "Gemini")

    def generate(
        self,
        ctx: GenerationContext,
        changes: str,
        options: GenerationOptions,
    ) -> GenerationResult:
        """Generate a commit message using Google Gemini.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ProviderError: For other API errors.
            GenerationCancelled: If ctx is done before the call returns.
        """
        client_kwargs = {"api_key": self.get_api_key()}
        remaining = ctx.remaining()
        if remaining is not None:
            # google-genai takes the timeout in milliseconds
            client_kwargs["http_options"] = types.HttpOptions(timeout=int(remaining * 1000))
        client = genai.Client(**client_kwargs)

        user_prompt = self.build_user_prompt(changes, options)
        ctx.raise_if_cancelled()

        try:
            response = self._run_cancellable(ctx, lambda: client.models.generate_content(
                model=self.model,
                contents=user_prompt,
                config=types.GenerateContentConfig(
                    system_instruction=SYSTEM_PROMPT,
                    max_output_tokens=_config.MAX_TOKENS,
                    temperature=_config.TEMPERATURE,
                ),
            ))
            if not response.candidates:
                raise ProviderError("Gemini returned no candidates in response")
            raw_response = response.text

            usage = None
            metadata = response.usage_metadata
            if metadata is not None:
                prompt_tokens = metadata.prompt_token_count or 0
                completion_tokens = metadata.candidates_token_count or 0
                usage = TokenUsage(
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens,
                    total_tokens=metadata.total_token_count or prompt_tokens + completion_tokens,
                )
        except (ProviderError, GenerationCancelled):
            raise
        except Exception as e:
            raise ProviderError(f"Gemini API call failed: {e}")

        return GenerationResult(
            message=clean_message(raw_response),
            model=self.model,
            usage=usage,
            cost=estimate_cost(self.model, usage),
        )
