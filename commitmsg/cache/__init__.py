"""Cache module for commitmsg.

This package caches generated commit messages to prevent redundant LLM API calls:
- models: CacheConfig, CacheEntry, CacheStats data models
- utils: Fingerprint computation
- store: MessageCache, the thread-safe content-addressed cache
"""

from commitmsg.cache.models import (
    CacheConfig,
    CacheDocument,
    CacheEntry,
    CacheStats,
)
from commitmsg.cache.store import MessageCache
from commitmsg.cache.utils import compute_fingerprint


__all__ = [
    "CacheConfig",
    "CacheDocument",
    "CacheEntry",
    "CacheStats",
    "MessageCache",
    "compute_fingerprint",
]
