"""Usage statistics for commitmsg.

- models: GenerationEvent, UsageStats, ProviderStats, TokenUsage
- ledger: StatsLedger, the durable thread-safe aggregate
"""

from commitmsg.usage.ledger import StatsLedger
from commitmsg.usage.models import (
    GenerationEvent,
    ProviderStats,
    TokenUsage,
    UsageStats,
)


__all__ = [
    "GenerationEvent",
    "ProviderStats",
    "StatsLedger",
    "TokenUsage",
    "UsageStats",
]
