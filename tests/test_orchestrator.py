"""Tests for commitmsg.orchestrator module."""

import threading
import time

import pytest
import yaml

from commitmsg.cache import CacheConfig, MessageCache
from commitmsg.config import LLMProvider
from commitmsg.context import GenerationContext
from commitmsg.exceptions import (
    EmptyChangesError,
    GenerationCancelled,
    PersistenceError,
    RateLimitAbort,
)
from commitmsg.llm.base import GenerationOptions
from commitmsg.llm.exceptions import MissingAPIKeyError, ProviderError
from commitmsg.orchestrator import Orchestrator
from commitmsg.ratelimit import RateLimiter
from commitmsg.usage import StatsLedger


class TestGenerateMessage:
    """Tests for Orchestrator.generate_message."""

    def test_miss_calls_provider_and_records(self, orchestrator, fake_provider, sample_diff):
        """Test that a cache miss calls the provider, stores and records."""
        message = orchestrator.generate_message(None, fake_provider, sample_diff)

        assert message == "mock commit message"
        assert fake_provider.calls == 1
        assert len(orchestrator.cache) == 1

        stats = orchestrator.snapshot()
        assert stats.total_generations == 1
        assert stats.successful_generations == 1
        assert stats.cache_misses == 1
        assert stats.total_tokens_used == 120
        assert stats.total_cost == pytest.approx(0.002)

    def test_second_call_is_cache_hit(self, orchestrator, fake_provider, sample_diff):
        """Test that an identical request is served from the cache."""
        first = orchestrator.generate_message(None, fake_provider, sample_diff)
        second = orchestrator.generate_message(None, fake_provider, sample_diff)

        assert first == second
        assert fake_provider.calls == 1

        stats = orchestrator.snapshot()
        assert stats.total_generations == 2
        assert stats.cache_hits == 1
        assert stats.cache_misses == 1
        assert orchestrator.ledger.cache_hit_rate() == pytest.approx(50.0)

    def test_cache_hit_records_no_cost(self, orchestrator, fake_provider, sample_diff):
        """Test that a hit adds no cost or tokens."""
        orchestrator.generate_message(None, fake_provider, sample_diff)
        orchestrator.generate_message(None, fake_provider, sample_diff)

        stats = orchestrator.snapshot()
        assert stats.total_cost == pytest.approx(0.002)
        assert stats.total_tokens_used == 120

    def test_new_attempt_bypasses_cached_message(self, orchestrator, make_provider, sample_diff):
        """Test that a different attempt index produces a separate cache slot."""
        provider = make_provider()
        orchestrator.generate_message(None, provider, sample_diff, GenerationOptions(attempt=1))
        orchestrator.generate_message(None, provider, sample_diff, GenerationOptions(attempt=2))

        assert provider.calls == 2
        assert len(orchestrator.cache) == 2

    def test_style_instruction_changes_slot(self, orchestrator, fake_provider, sample_diff):
        """Test that a style instruction is part of the cache key."""
        orchestrator.generate_message(None, fake_provider, sample_diff)
        orchestrator.generate_message(
            None, fake_provider, sample_diff, GenerationOptions(style_instruction="be terse")
        )
        assert fake_provider.calls == 2

    def test_providers_do_not_share_entries(self, orchestrator, make_provider, sample_diff):
        """Test that the same changes on another provider are a miss."""
        openai = make_provider(provider=LLMProvider.OPENAI)
        claude = make_provider(message="claude message", provider=LLMProvider.CLAUDE)

        orchestrator.generate_message(None, openai, sample_diff)
        message = orchestrator.generate_message(None, claude, sample_diff)

        assert message == "claude message"
        assert orchestrator.provider_ranking() == ["claude", "openai"]

    @pytest.mark.parametrize("changes", ["", "   \n\t"])
    def test_empty_changes_rejected(self, orchestrator, fake_provider, changes):
        """Test that empty changes fail before any side effect."""
        with pytest.raises(EmptyChangesError):
            orchestrator.generate_message(None, fake_provider, changes)

        assert fake_provider.calls == 0
        assert orchestrator.snapshot().total_generations == 0
        assert orchestrator.cache_stats().total_misses == 0

    def test_provider_failure_recorded(self, orchestrator, make_provider, sample_diff):
        """Test that a failing provider is recorded and nothing is cached."""
        provider = make_provider(error=ProviderError("rate limited"))

        with pytest.raises(ProviderError, match="rate limited"):
            orchestrator.generate_message(None, provider, sample_diff)

        stats = orchestrator.snapshot()
        assert stats.failed_generations == 1
        assert stats.provider_stats["openai"].failed_uses == 1
        assert len(orchestrator.cache) == 0
        assert orchestrator.limiter.active == 0

    def test_deadline_during_provider_call(self, orchestrator, make_provider, sample_diff):
        """Test that a deadline expiring mid-call fails fast and frees the slot."""
        provider = make_provider(hang=5)
        start = time.monotonic()

        with pytest.raises(GenerationCancelled):
            orchestrator.generate_message(GenerationContext.with_timeout(0.3), provider, sample_diff)

        assert time.monotonic() - start < 1.0
        stats = orchestrator.snapshot()
        assert stats.failed_generations == 1
        assert stats.provider_stats["openai"].failed_uses == 1
        assert len(orchestrator.cache) == 0
        assert orchestrator.limiter.active == 0

    def test_cancel_during_provider_call(self, orchestrator, make_provider, sample_diff):
        """Test that cancelling from another thread interrupts the provider call."""
        provider = make_provider(hang=5)
        ctx = GenerationContext()
        timer = threading.Timer(0.2, ctx.cancel)
        timer.start()
        start = time.monotonic()

        try:
            with pytest.raises(GenerationCancelled, match="cancelled"):
                orchestrator.generate_message(ctx, provider, sample_diff)
        finally:
            timer.cancel()

        assert time.monotonic() - start < 1.0
        assert orchestrator.snapshot().failed_generations == 1
        assert orchestrator.limiter.active == 0

        assert orchestrator.generate_message(None, make_provider(), sample_diff) == "mock commit message"

    def test_provider_error_subclass_passes_through(self, orchestrator, make_provider, sample_diff):
        """Test that provider error subclasses are re-raised unchanged."""
        provider = make_provider(error=MissingAPIKeyError("no key"))

        with pytest.raises(MissingAPIKeyError):
            orchestrator.generate_message(None, provider, sample_diff)

    def test_unexpected_error_wrapped(self, orchestrator, make_provider, sample_diff):
        """Test that arbitrary exceptions surface as ProviderError."""
        provider = make_provider(error=RuntimeError("socket closed"))

        with pytest.raises(ProviderError, match="socket closed") as exc_info:
            orchestrator.generate_message(None, provider, sample_diff)

        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert orchestrator.snapshot().failed_generations == 1

    def test_failure_then_retry_succeeds(self, orchestrator, make_provider, sample_diff):
        """Test that a failed attempt does not poison the cache."""
        failing = make_provider(error=ProviderError("timeout"))
        with pytest.raises(ProviderError):
            orchestrator.generate_message(None, failing, sample_diff)

        working = make_provider()
        assert orchestrator.generate_message(None, working, sample_diff) == "mock commit message"
        assert working.calls == 1

    def test_rate_limit_abort_records_nothing(self, cache_config, stats_path, fake_provider, sample_diff):
        """Test that aborting while waiting for a slot leaves no trace."""
        orchestrator = Orchestrator(
            MessageCache(cache_config), StatsLedger(stats_path), RateLimiter(1)
        )
        release = orchestrator.limiter.acquire()
        ctx = GenerationContext()
        ctx.cancel()

        with pytest.raises(RateLimitAbort):
            orchestrator.generate_message(ctx, fake_provider, sample_diff)

        release()
        assert fake_provider.calls == 0
        assert orchestrator.snapshot().total_generations == 0

    def test_persistence_failures_tolerated(self, orchestrator, fake_provider, sample_diff, mocker):
        """Test that a message is returned even if neither file can be written."""
        mocker.patch(
            "commitmsg.cache.store.write_document",
            side_effect=PersistenceError("read-only"),
        )
        mocker.patch(
            "commitmsg.usage.ledger.write_document",
            side_effect=PersistenceError("read-only"),
        )

        message = orchestrator.generate_message(None, fake_provider, sample_diff)

        assert message == "mock commit message"
        assert orchestrator.snapshot().total_generations == 1
        assert len(orchestrator.cache) == 1

    def test_disabled_cache_always_calls_provider(self, temp_dir, stats_path, fake_provider, sample_diff):
        """Test that with caching off every call hits the provider."""
        config = CacheConfig(enabled=False, cache_file_path=temp_dir / "cache.json")
        orchestrator = Orchestrator(MessageCache(config), StatsLedger(stats_path), RateLimiter(5))

        orchestrator.generate_message(None, fake_provider, sample_diff)
        orchestrator.generate_message(None, fake_provider, sample_diff)

        stats = orchestrator.snapshot()
        assert fake_provider.calls == 2
        assert stats.total_generations == 2
        assert stats.cache_hits == 0
        assert stats.cache_misses == 0

    def test_concurrent_requests(self, orchestrator, make_provider):
        """Test that 100 concurrent requests all succeed within the ceiling."""
        provider = make_provider(delay=0.01)
        results = [None] * 100
        errors = []

        def worker(i):
            try:
                results[i] = orchestrator.generate_message(
                    None, provider, f"diff --git a/f{i}.py b/f{i}.py\n+line {i}\n"
                )
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(100)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=30)

        assert errors == []
        assert all(r == "mock commit message" for r in results)
        assert provider.calls == 100
        assert provider.max_in_flight <= 5

        stats = orchestrator.snapshot()
        assert stats.total_generations == 100
        assert stats.successful_generations == 100
        assert len(orchestrator.cache) == 100


class TestGenerateBatch:
    """Tests for Orchestrator.generate_batch."""

    def test_results_in_input_order(self, orchestrator, fake_provider):
        """Test that batch results line up with inputs."""
        changes = [f"+change {i}\n" for i in range(8)]
        items = orchestrator.generate_batch(None, fake_provider, changes)

        assert [item.changes for item in items] == changes
        assert all(item.ok for item in items)
        assert orchestrator.snapshot().total_generations == 8

    def test_failures_reported_per_item(self, orchestrator, fake_provider):
        """Test that one bad input does not fail the whole batch."""
        items = orchestrator.generate_batch(None, fake_provider, ["+ok\n", ""])

        assert items[0].ok
        assert items[0].message == "mock commit message"
        assert not items[1].ok
        assert isinstance(items[1].error, EmptyChangesError)

    def test_empty_batch(self, orchestrator, fake_provider):
        """Test that an empty batch returns an empty list."""
        assert orchestrator.generate_batch(None, fake_provider, []) == []


class TestQuerySurface:
    """Tests for the orchestrator's read and reset operations."""

    def test_most_used_provider(self, orchestrator, make_provider):
        """Test the most used provider across calls."""
        groq = make_provider(provider=LLMProvider.GROQ)
        orchestrator.generate_message(None, groq, "+a\n")
        orchestrator.generate_message(None, groq, "+b\n")
        orchestrator.generate_message(None, make_provider(), "+c\n")

        assert orchestrator.most_used_provider() == ("groq", 2)

    def test_success_and_cache_hit_rates(self, orchestrator, make_provider, sample_diff):
        """Test the overall success and cache hit percentages."""
        provider = make_provider()
        orchestrator.generate_message(None, provider, sample_diff)
        orchestrator.generate_message(None, provider, sample_diff)
        with pytest.raises(ProviderError):
            orchestrator.generate_message(None, make_provider(error=ProviderError("down")), "+other\n")

        assert orchestrator.overall_success_rate() == pytest.approx(200 / 3)
        assert orchestrator.cache_hit_rate() == pytest.approx(100 / 3)

    def test_rates_empty(self, orchestrator):
        """Test that rates are zero before any generation."""
        assert orchestrator.overall_success_rate() == 0.0
        assert orchestrator.cache_hit_rate() == 0.0

    def test_cache_stats(self, orchestrator, fake_provider, sample_diff):
        """Test that cache stats reflect a hit and a miss."""
        orchestrator.generate_message(None, fake_provider, sample_diff)
        orchestrator.generate_message(None, fake_provider, sample_diff)

        stats = orchestrator.cache_stats()
        assert stats.total_entries == 1
        assert stats.total_hits == 1
        assert stats.total_misses == 1
        assert stats.total_cost_saved == pytest.approx(0.002)

    def test_reset_and_clear(self, orchestrator, fake_provider, sample_diff):
        """Test that reset_stats and clear_cache empty both stores."""
        orchestrator.generate_message(None, fake_provider, sample_diff)
        orchestrator.reset_stats()
        orchestrator.clear_cache()

        assert orchestrator.snapshot().total_generations == 0
        assert len(orchestrator.cache) == 0


class TestFromConfig:
    """Tests for Orchestrator.from_config."""

    def test_defaults(self, config_dir):
        """Test that an unconfigured install uses default locations."""
        orchestrator = Orchestrator.from_config()

        assert orchestrator.cache.config.cache_file_path == config_dir / "cache.json"
        assert orchestrator.ledger.path == config_dir / "usage_stats.json"
        assert orchestrator.limiter.max_concurrent == 5

    def test_reads_settings(self, config_dir, temp_dir):
        """Test that config.yaml settings are applied."""
        config_dir.mkdir(parents=True)
        (config_dir / "config.yaml").write_text(yaml.dump({
            "max_concurrent": 2,
            "cache": {"enabled": False, "max_entries": 10},
            "stats": {"file_path": str(temp_dir / "custom_stats.json")},
        }))

        orchestrator = Orchestrator.from_config()

        assert orchestrator.limiter.max_concurrent == 2
        assert orchestrator.cache.config.enabled is False
        assert orchestrator.cache.config.max_entries == 10
        assert orchestrator.ledger.path == temp_dir / "custom_stats.json"
