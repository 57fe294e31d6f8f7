"""Usage statistics data models for commitmsg.

Contains:
- TokenUsage: Token counts reported by a provider
- GenerationEvent: One orchestrator invocation, consumed by the ledger
- ProviderStats: Aggregates for a single provider
- UsageStats: Aggregates across all providers
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()


class TokenUsage(BaseModel):
    """Token counts for a single generation."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class GenerationEvent:
    """A single commit message generation, recorded once by the ledger."""

    provider: str
    success: bool
    generation_time_ms: float = 0.0
    tokens_used: int = 0
    cost: float = 0.0
    cache_checked: bool = False
    cache_hit: bool = False
    timestamp: str = field(default_factory=utc_now_iso)
    error_message: Optional[str] = None


class ProviderStats(BaseModel):
    """Statistics for a specific LLM provider."""

    name: str
    total_uses: int = 0
    successful_uses: int = 0
    failed_uses: int = 0
    total_cost: float = 0.0
    total_tokens_used: int = 0
    average_generation_time_ms: float = 0.0
    first_used: str = ""
    last_used: str = ""
    success_rate: float = 0.0


class UsageStats(BaseModel):
    """Usage statistics for the whole application."""

    total_generations: int = 0
    successful_generations: int = 0
    failed_generations: int = 0
    provider_stats: dict[str, ProviderStats] = Field(default_factory=dict)
    first_use: str = ""
    last_use: str = ""
    total_cost: float = 0.0
    total_tokens_used: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    average_generation_time_ms: float = 0.0
