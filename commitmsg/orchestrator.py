"""Generation orchestrator: the entry point for producing commit messages.

Every request follows the same sequence:

    fingerprint -> cache lookup -> (miss) rate limiter slot -> provider call
    -> cache store -> stats record -> message

The orchestrator owns the cache, the stats ledger and the rate limiter.
Providers are created by the caller and passed in per request.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence

import structlog

from commitmsg import global_config
from commitmsg.cache import CacheEntry, CacheStats, MessageCache, compute_fingerprint
from commitmsg.context import GenerationContext
from commitmsg.exceptions import EmptyChangesError, GenerationCancelled, PersistenceError
from commitmsg.llm.base import BaseLLMProvider, GenerationOptions
from commitmsg.llm.exceptions import ProviderError
from commitmsg.ratelimit import RateLimiter
from commitmsg.usage import GenerationEvent, StatsLedger, UsageStats

logger = structlog.get_logger(__name__)


@dataclass
class BatchItem:
    """Outcome of one request in a batch."""

    changes: str
    message: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        """True if a message was produced."""
        return self.error is None


class Orchestrator:
    """Composes cache, rate limiter, provider and stats ledger."""

    def __init__(self, cache: MessageCache, ledger: StatsLedger, limiter: RateLimiter):
        self.cache = cache
        self.ledger = ledger
        self.limiter = limiter

    @classmethod
    def from_config(cls) -> "Orchestrator":
        """Build an orchestrator from ~/.commitmsg/config.yaml.

        Raises:
            ConfigurationError: If the config, cache or stats file is malformed.
        """
        cache = MessageCache.load(global_config.get_cache_config())
        ledger = StatsLedger.load(global_config.get_stats_file_path())
        limiter = RateLimiter(global_config.get_max_concurrent())
        return cls(cache, ledger, limiter)

    def generate_message(
        self,
        ctx: Optional[GenerationContext],
        provider: BaseLLMProvider,
        changes: str,
        options: Optional[GenerationOptions] = None,
    ) -> str:
        """Produce a commit message for the given changes.

        Args:
            ctx: Cancellation signal and deadline. None means no limit.
            provider: The provider adapter to call on a cache miss.
            changes: The diff text.
            options: Style instruction and attempt index.

        Returns:
            The commit message, from the cache or freshly generated.

        Raises:
            EmptyChangesError: If changes is empty or whitespace.
            RateLimitAbort: If ctx is cancelled while waiting for a slot.
            GenerationCancelled: If ctx is cancelled or expires during the provider call.
            ProviderError: If the provider fails.
        """
        if not changes or not changes.strip():
            raise EmptyChangesError("No changes to generate a commit message for")

        ctx = ctx or GenerationContext()
        options = options or GenerationOptions()
        provider_id = provider.name().value
        fingerprint = compute_fingerprint(
            changes, provider_id, options.style_instruction, options.attempt
        )
        log = logger.bind(provider=provider_id, fingerprint=fingerprint[:12], attempt=options.attempt)

        entry, found = self.cache.lookup(fingerprint)
        if found:
            log.info("generation_cache_hit")
            self._record(GenerationEvent(
                provider=provider_id,
                success=True,
                cache_checked=True,
                cache_hit=True,
            ))
            return entry.message

        cache_checked = self.cache.config.enabled
        release = self.limiter.acquire(ctx)
        try:
            started = time.perf_counter()
            try:
                result = provider.generate(ctx, changes, options)
            except Exception as e:
                elapsed_ms = (time.perf_counter() - started) * 1000
                log.warning("generation_failed", error=str(e), elapsed_ms=round(elapsed_ms, 1))
                self._record(GenerationEvent(
                    provider=provider_id,
                    success=False,
                    generation_time_ms=elapsed_ms,
                    cache_checked=cache_checked,
                    error_message=str(e),
                ))
                if isinstance(e, (ProviderError, GenerationCancelled)):
                    raise
                raise ProviderError(f"{provider_id} generation failed: {e}") from e

            elapsed_ms = (time.perf_counter() - started) * 1000
            tokens_used = result.usage.total_tokens if result.usage else 0

            self._store(fingerprint, CacheEntry(
                message=result.message,
                provider=provider_id,
                fingerprint=fingerprint,
                style_instruction=options.style_instruction,
                attempt=options.attempt,
                cost=result.cost,
                tokens=result.usage,
            ))
            self._record(GenerationEvent(
                provider=provider_id,
                success=True,
                generation_time_ms=elapsed_ms,
                tokens_used=tokens_used,
                cost=result.cost,
                cache_checked=cache_checked,
            ))
            log.info(
                "generation_complete",
                model=result.model,
                elapsed_ms=round(elapsed_ms, 1),
                tokens=tokens_used,
            )
            return result.message
        finally:
            release()

    def generate_batch(
        self,
        ctx: Optional[GenerationContext],
        provider: BaseLLMProvider,
        changes_list: Sequence[str],
        options: Optional[GenerationOptions] = None,
        max_workers: Optional[int] = None,
    ) -> list[BatchItem]:
        """Generate messages for several change sets concurrently.

        The rate limiter still bounds in-flight provider calls; max_workers
        only bounds the number of threads.

        Returns:
            One BatchItem per input, in input order.
        """
        if not changes_list:
            return []

        def run(changes: str) -> BatchItem:
            try:
                return BatchItem(changes, message=self.generate_message(ctx, provider, changes, options))
            except Exception as e:
                return BatchItem(changes, error=e)

        workers = max_workers or min(32, len(changes_list))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="commitmsg") as pool:
            return list(pool.map(run, changes_list))

    # ------------------------------------------------------------------
    # Query surface
    # ------------------------------------------------------------------

    def snapshot(self) -> UsageStats:
        """Return a copy of the usage statistics."""
        return self.ledger.snapshot()

    def cache_stats(self) -> CacheStats:
        """Return statistics over the cached entries."""
        return self.cache.stats()

    def provider_ranking(self) -> list[str]:
        """Return provider names ordered by descending use count."""
        return self.ledger.provider_ranking()

    def most_used_provider(self) -> tuple[Optional[str], int]:
        """Return (provider, uses) for the most used provider, or (None, 0)."""
        return self.ledger.most_used_provider()

    def overall_success_rate(self) -> float:
        """Return the percentage of generations that succeeded."""
        return self.ledger.overall_success_rate()

    def cache_hit_rate(self) -> float:
        """Return the percentage of cache checks that were hits."""
        return self.ledger.cache_hit_rate()

    def reset_stats(self) -> None:
        """Clear usage statistics and persist the empty ledger."""
        self.ledger.reset()

    def clear_cache(self) -> None:
        """Remove all cached messages."""
        self.cache.clear()

    def _store(self, fingerprint: str, entry: CacheEntry) -> None:
        try:
            self.cache.store(fingerprint, entry)
        except PersistenceError as e:
            logger.warning("cache_persist_failed", error=str(e))

    def _record(self, event: GenerationEvent) -> None:
        try:
            self.ledger.record(event)
        except PersistenceError as e:
            logger.warning("stats_persist_failed", error=str(e))
