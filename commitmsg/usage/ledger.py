"""Durable usage statistics ledger.

StatsLedger accumulates GenerationEvents into UsageStats, globally and per
provider, and rewrites the stats file after every update.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import structlog
from pydantic import ValidationError

from commitmsg.exceptions import ConfigurationError
from commitmsg.storage import read_document, write_document
from commitmsg.usage.models import GenerationEvent, ProviderStats, UsageStats, utc_now_iso

logger = structlog.get_logger(__name__)


def _running_mean(previous: float, count: int, sample: float) -> float:
    """Fold one sample into a mean over ``count`` samples (sample included)."""
    return (previous * (count - 1) + sample) / count


class StatsLedger:
    """Thread-safe usage statistics with JSON persistence."""

    def __init__(self, path: Path, stats: Optional[UsageStats] = None):
        """Initialize the ledger.

        Args:
            path: Location of the stats file.
            stats: Initial statistics. Defaults to an empty ledger.
        """
        self.path = path
        self._lock = threading.Lock()
        self._stats = stats or UsageStats()

    @classmethod
    def load(cls, path: Path) -> "StatsLedger":
        """Load the ledger from disk.

        Args:
            path: Location of the stats file.

        Returns:
            A StatsLedger. Missing or empty files give an empty ledger.

        Raises:
            ConfigurationError: If the file content is malformed.
        """
        text = read_document(path)
        if text is None:
            return cls(path)

        try:
            stats = UsageStats.model_validate_json(text)
        except ValidationError as e:
            raise ConfigurationError(f"Malformed stats file {path}: {e}")
        return cls(path, stats)

    def record(self, event: GenerationEvent) -> None:
        """Record a generation event and persist the ledger.

        Args:
            event: The event to record.

        Raises:
            PersistenceError: If the stats file cannot be written. The
                in-memory statistics keep the update.
        """
        with self._lock:
            stats = self._stats
            now = utc_now_iso()

            stats.total_generations += 1
            if event.success:
                stats.successful_generations += 1
            else:
                stats.failed_generations += 1

            stats.total_cost += event.cost
            stats.total_tokens_used += event.tokens_used
            stats.last_use = now
            if not stats.first_use:
                stats.first_use = now

            # Only count cache outcomes when the cache was actually consulted
            if event.cache_checked:
                if event.cache_hit:
                    stats.cache_hits += 1
                else:
                    stats.cache_misses += 1

            stats.average_generation_time_ms = _running_mean(
                stats.average_generation_time_ms,
                stats.total_generations,
                event.generation_time_ms,
            )

            provider = stats.provider_stats.get(event.provider)
            if provider is None:
                provider = ProviderStats(name=event.provider, first_used=now)
                stats.provider_stats[event.provider] = provider

            provider.total_uses += 1
            if event.success:
                provider.successful_uses += 1
            else:
                provider.failed_uses += 1
            provider.total_cost += event.cost
            provider.total_tokens_used += event.tokens_used
            provider.last_used = now
            provider.average_generation_time_ms = _running_mean(
                provider.average_generation_time_ms,
                provider.total_uses,
                event.generation_time_ms,
            )
            provider.success_rate = provider.successful_uses / provider.total_uses * 100

            self._save_locked()

    def snapshot(self) -> UsageStats:
        """Return a deep copy of the current statistics."""
        with self._lock:
            return self._stats.model_copy(deep=True)

    def most_used_provider(self) -> tuple[Optional[str], int]:
        """Return the provider with the highest use count.

        Returns:
            (provider, count), or (None, 0) if nothing was recorded.
        """
        with self._lock:
            most_used: Optional[str] = None
            max_uses = 0
            for name, provider in self._stats.provider_stats.items():
                if provider.total_uses > max_uses:
                    most_used = name
                    max_uses = provider.total_uses
            return most_used, max_uses

    def overall_success_rate(self) -> float:
        """Return the overall success rate as a percentage."""
        with self._lock:
            total = self._stats.total_generations
            if total == 0:
                return 0.0
            return self._stats.successful_generations / total * 100

    def cache_hit_rate(self) -> float:
        """Return the cache hit rate as a percentage."""
        with self._lock:
            attempts = self._stats.cache_hits + self._stats.cache_misses
            if attempts == 0:
                return 0.0
            return self._stats.cache_hits / attempts * 100

    def provider_ranking(self) -> list[str]:
        """Return providers ordered by descending use count."""
        with self._lock:
            ranked = sorted(
                self._stats.provider_stats.values(),
                key=lambda p: (-p.total_uses, p.name),
            )
            return [p.name for p in ranked]

    def reset(self) -> None:
        """Clear all statistics and persist the empty ledger.

        Raises:
            PersistenceError: If the stats file cannot be written.
        """
        with self._lock:
            self._stats = UsageStats()
            self._save_locked()
        logger.info("stats_reset", path=str(self.path))

    def _save_locked(self) -> None:
        write_document(self.path, self._stats.model_dump_json(indent=2))
