"""Shared test fixtures and configuration."""

import tempfile
import threading
import time
from pathlib import Path

import pytest

from commitmsg.cache import CacheConfig, MessageCache
from commitmsg.config import LLMProvider
from commitmsg.llm.base import BaseLLMProvider, GenerationResult
from commitmsg.orchestrator import Orchestrator
from commitmsg.ratelimit import RateLimiter
from commitmsg.usage import StatsLedger, TokenUsage


class FakeProvider(BaseLLMProvider):
    """Provider that returns a canned message and tracks concurrency."""

    def __init__(
        self,
        message: str = "mock commit message",
        provider: LLMProvider = LLMProvider.OPENAI,
        error: Exception | None = None,
        delay: float = 0.0,
        cost: float = 0.002,
        hang: float = 0.0,
    ):
        self.message = message
        self.provider = provider
        self.error = error
        self.delay = delay
        self.cost = cost
        # Seconds spent in a blocking call that ctx can interrupt
        self.hang = hang
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def name(self) -> LLMProvider:
        return self.provider

    def generate(self, ctx, changes, options):
        with self._lock:
            self.calls += 1
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.hang:
                self._run_cancellable(ctx, lambda: time.sleep(self.hang))
            if self.error is not None:
                raise self.error
            return GenerationResult(
                message=self.message,
                model="fake-model",
                usage=TokenUsage(prompt_tokens=100, completion_tokens=20, total_tokens=120),
                cost=self.cost,
            )
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config_dir(temp_dir, mocker):
    """Point ~/.commitmsg at a temporary directory."""
    config_dir = temp_dir / ".commitmsg"
    mocker.patch("commitmsg.global_config._CONFIG_DIR", config_dir)
    return config_dir


@pytest.fixture
def cache_config(temp_dir):
    """Default cache policy writing into the temp directory."""
    return CacheConfig(cache_file_path=temp_dir / "cache.json")


@pytest.fixture
def stats_path(temp_dir):
    """Location of the stats file in the temp directory."""
    return temp_dir / "usage_stats.json"


@pytest.fixture
def fake_provider():
    """A provider that always succeeds."""
    return FakeProvider()


@pytest.fixture
def make_provider():
    """Factory for FakeProvider instances with custom behaviour."""
    return FakeProvider


@pytest.fixture
def orchestrator(cache_config, stats_path):
    """Orchestrator over fresh stores with a ceiling of 5."""
    return Orchestrator(
        MessageCache(cache_config),
        StatsLedger(stats_path),
        RateLimiter(5),
    )


@pytest.fixture
def sample_diff():
    """Sample staged diff for testing."""
    return """diff --git a/existing_file.py b/existing_file.py
index 1234567..abcdefg 100644
--- a/existing_file.py
+++ b/existing_file.py
@@ -1,5 +1,8 @@
 def main():
-    print("old")
+    print("new")
+
+def helper():
+    return True
"""


@pytest.fixture(autouse=True)
def restore_active_config(mocker):
    """Undo load_config() changes to the module-level active settings."""
    import commitmsg.config as config

    mocker.patch.object(config, "ACTIVE_PROVIDER", config.ACTIVE_PROVIDER)
    mocker.patch.object(config, "ACTIVE_MODEL", config.ACTIVE_MODEL)
    mocker.patch.object(config, "MAX_TOKENS", config.MAX_TOKENS)
    mocker.patch.object(config, "TEMPERATURE", config.TEMPERATURE)
