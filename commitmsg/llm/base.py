"""Base classes and shared utilities for LLM providers."""

import os
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from commitmsg.config import MODEL_PRICING, LLMProvider
from commitmsg.context import GenerationContext
from commitmsg.llm.exceptions import MissingAPIKeyError, ProviderError
from commitmsg.llm.prompts import build_user_prompt
from commitmsg.usage.models import TokenUsage

T = TypeVar("T")

# How often a waiting caller re-checks the context during an SDK call
_CANCEL_POLL_INTERVAL = 0.05


def _poll_timeout(ctx: GenerationContext) -> float:
    remaining = ctx.remaining()
    if remaining is None:
        return _CANCEL_POLL_INTERVAL
    return min(_CANCEL_POLL_INTERVAL, remaining)


@dataclass(frozen=True)
class GenerationOptions:
    """Per-request generation options."""

    style_instruction: Optional[str] = None
    # Bump to get a fresh message for the same changes instead of the cached one
    attempt: int = 1


@dataclass
class GenerationResult:
    """Result from a provider call, including token usage and cost."""

    message: str
    model: str
    usage: Optional[TokenUsage] = None
    cost: float = 0.0


def estimate_cost(model: str, usage: Optional[TokenUsage]) -> float:
    """Estimate the USD cost of a call from its token usage.

    Args:
        model: The model name.
        usage: Token usage reported by the provider.

    Returns:
        Estimated cost, 0.0 for unknown models or missing usage.
    """
    if usage is None or model not in MODEL_PRICING:
        return 0.0
    input_price, output_price = MODEL_PRICING[model]
    return (usage.prompt_tokens * input_price + usage.completion_tokens * output_price) / 1_000_000


def clean_message(raw_response: Optional[str]) -> str:
    """Strip whitespace and markdown fences from a provider response.

    Args:
        raw_response: The raw text returned by the model.

    Returns:
        The commit message text.

    Raises:
        ProviderError: If the response is empty.
    """
    cleaned = (raw_response or "").strip()

    # Remove markdown code fences if the model included them despite instructions
    if cleaned.startswith("```"):
        lines = cleaned.split("\n")[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()

    if not cleaned:
        raise ProviderError("Provider returned an empty commit message")
    return cleaned


class BaseLLMProvider(ABC):
    """Abstract base class for LLM providers.

    The orchestrator only relies on ``name`` and ``generate``.
    """

    @abstractmethod
    def name(self) -> LLMProvider:
        """Return the provider identifier."""
        pass

    @abstractmethod
    def generate(
        self,
        ctx: GenerationContext,
        changes: str,
        options: GenerationOptions,
    ) -> GenerationResult:
        """Generate a commit message for the given changes.

        Args:
            ctx: Cancellation signal and deadline for the call.
            changes: The diff text.
            options: Style instruction and attempt index.

        Returns:
            A GenerationResult with the message, token usage and cost.

        Raises:
            MissingAPIKeyError: If the API key is not set.
            ProviderError: For other provider failures.
            GenerationCancelled: If ctx is done before the call returns.
        """
        pass

    def build_user_prompt(self, changes: str, options: GenerationOptions) -> str:
        """Build the user prompt for a request."""
        return build_user_prompt(changes, options.style_instruction, options.attempt)

    def _client_timeout_kwargs(self, ctx: GenerationContext) -> dict:
        """SDK client keyword arguments bounding the call by ctx's deadline.

        SDK retries are turned off under a deadline; each retry would get
        the full timeout again.
        """
        remaining = ctx.remaining()
        if remaining is None:
            return {}
        return {"timeout": remaining, "max_retries": 0}

    def _run_cancellable(self, ctx: GenerationContext, call: Callable[[], T]) -> T:
        """Run a blocking SDK call, giving up as soon as ctx is done.

        The call runs on a daemon thread. When ctx is cancelled or expires
        first, the caller gets GenerationCancelled right away and the
        abandoned call's outcome is discarded.

        Raises:
            GenerationCancelled: If ctx is done before the call returns.
        """
        outcome: dict = {}
        done = threading.Event()

        def target() -> None:
            try:
                outcome["result"] = call()
            except Exception as e:
                outcome["error"] = e
            finally:
                done.set()

        worker = threading.Thread(
            target=target,
            name=f"commitmsg-{self.name().value}",
            daemon=True,
        )
        worker.start()

        while not done.wait(_poll_timeout(ctx)):
            ctx.raise_if_cancelled()

        if "error" in outcome:
            raise outcome["error"]
        return outcome["result"]

    def _get_api_key_with_fallback(self, env_var_name: str, provider_name: str) -> str:
        """Helper to get API key with fallback to credentials file.

        Args:
            env_var_name: Environment variable name to check.
            provider_name: Human-readable provider name for error messages.

        Returns:
            The API key string.

        Raises:
            MissingAPIKeyError: If the API key is not found.
        """
        # First check environment variable
        api_key = os.getenv(env_var_name)
        if api_key:
            return api_key

        # Then check credentials file
        from commitmsg.global_config import get_credential

        api_key = get_credential(env_var_name)
        if api_key:
            return api_key

        raise MissingAPIKeyError(
            f"{provider_name} API key not found. Set it using:\n"
            f"  1. Environment variable: export {env_var_name}=your_key_here\n"
            f"  2. Run: commitmsg config set-key {provider_name.lower()}\n"
            f"  3. Manually add to ~/.commitmsg/credentials"
        )
