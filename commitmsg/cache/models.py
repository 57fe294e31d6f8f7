"""Cache data models for commitmsg.

Contains Pydantic models for the message cache:
- CacheConfig: Process-wide cache policy
- CacheEntry: One cached commit message
- CacheStats: Aggregate view computed from the entry set
- CacheDocument: On-disk layout of the cache file
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from commitmsg.usage.models import TokenUsage


class CacheConfig(BaseModel):
    """Cache policy, read once at startup."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    max_entries: int = Field(default=500, ge=1)
    max_age_days: int = Field(default=30, ge=0)
    cleanup_interval_hours: int = Field(default=24, ge=0)
    cache_file_path: Path


class CacheEntry(BaseModel):
    """A cached commit message with its metadata."""

    message: str
    provider: str
    fingerprint: str
    style_instruction: Optional[str] = None
    attempt: int = 1
    created_at: str = ""  # ISO format timestamp
    last_accessed_at: str = ""  # ISO format timestamp
    access_count: int = Field(default=0, ge=0)
    cost: Optional[float] = None
    tokens: Optional[TokenUsage] = None


class CacheStats(BaseModel):
    """Statistics about the cache, derived on demand."""

    total_entries: int = 0
    total_hits: int = 0
    total_misses: int = 0
    hit_rate: float = 0.0
    total_cost_saved: float = 0.0
    oldest_entry: Optional[str] = None
    newest_entry: Optional[str] = None
    cache_size_bytes: int = 0


class CacheDocument(BaseModel):
    """Layout of the persisted cache file."""

    config: Optional[CacheConfig] = None
    entries: dict[str, CacheEntry] = Field(default_factory=dict)
    total_hits: int = 0
    total_misses: int = 0
    last_cleanup: Optional[str] = None
