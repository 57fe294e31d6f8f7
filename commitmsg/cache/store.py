"""Content-addressed commit message cache.

MessageCache maps a request fingerprint to a previously generated message.
All reads and writes go through a single lock; the whole entry set is
persisted as one JSON document after every mutation.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from pydantic import ValidationError

from commitmsg.cache.models import CacheConfig, CacheDocument, CacheEntry, CacheStats
from commitmsg.exceptions import ConfigurationError, PersistenceError
from commitmsg.storage import read_document, write_document

logger = structlog.get_logger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _now() -> datetime:
    """Time source for timestamps and eviction (patched in tests)."""
    return datetime.now(timezone.utc)


def _parse_ts(value: Optional[str]) -> datetime:
    if not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class MessageCache:
    """Commit message cache keyed by request fingerprint."""

    def __init__(self, config: CacheConfig, document: Optional[CacheDocument] = None):
        """Initialize the cache.

        Args:
            config: Cache policy for this process.
            document: Previously persisted state, if any.
        """
        self.config = config
        self._lock = threading.Lock()
        document = document or CacheDocument()
        self._entries: dict[str, CacheEntry] = dict(document.entries)
        self._hits = document.total_hits
        self._misses = document.total_misses
        self._last_cleanup = document.last_cleanup

    @classmethod
    def load(cls, config: CacheConfig) -> "MessageCache":
        """Load the cache from its file.

        A missing or empty file yields an empty cache. When the cleanup
        interval has elapsed since the last cleanup, eviction runs once.

        Args:
            config: Cache policy, including the file location.

        Returns:
            A MessageCache instance.

        Raises:
            ConfigurationError: If the cache file is malformed.
        """
        if not config.enabled:
            return cls(config)

        path = config.cache_file_path
        text = read_document(path)
        if text is None:
            return cls(config)

        try:
            document = CacheDocument.model_validate_json(text)
        except ValidationError as e:
            raise ConfigurationError(f"Malformed cache file {path}: {e}")

        cache = cls(config, document)
        with cache._lock:
            if cache._cleanup_due_locked(_now()):
                removed = cache._evict_locked(_now())
                if removed:
                    logger.info("cache_cleanup", removed=removed, path=str(path))
                    cache._persist_quietly_locked()
        return cache

    def lookup(self, fingerprint: str) -> tuple[Optional[CacheEntry], bool]:
        """Look up a cached entry.

        A hit increments the stored access count and refreshes its
        last-accessed time. The returned copy reflects the entry as it was
        before this hit, so the first lookup after a store sees count 1.

        Args:
            fingerprint: The request fingerprint.

        Returns:
            (entry, True) on a hit, (None, False) otherwise.
        """
        if not self.config.enabled:
            return None, False

        with self._lock:
            entry = self._entries.get(fingerprint)
            if entry is None:
                self._misses += 1
                logger.debug("cache_miss", fingerprint=fingerprint[:12])
                return None, False

            result = entry.model_copy(deep=True)
            entry.access_count += 1
            entry.last_accessed_at = _now().isoformat()
            self._hits += 1
            self._persist_quietly_locked()

        logger.debug("cache_hit", fingerprint=fingerprint[:12], access_count=result.access_count)
        return result, True

    def store(self, fingerprint: str, entry: CacheEntry) -> None:
        """Store an entry, replacing any entry with the same fingerprint.

        Args:
            fingerprint: The request fingerprint.
            entry: The entry to store. The caller's object is not retained.

        Raises:
            PersistenceError: If the cache file cannot be written. The
                in-memory cache keeps the new entry.
        """
        if not self.config.enabled:
            return

        with self._lock:
            now = _now()
            stamp = now.isoformat()
            stored = entry.model_copy(
                deep=True,
                update={
                    "fingerprint": fingerprint,
                    "access_count": 1,
                    "created_at": stamp,
                    "last_accessed_at": stamp,
                },
            )
            # Re-insert so the newest entry sorts last among equal timestamps
            self._entries.pop(fingerprint, None)
            self._entries[fingerprint] = stored
            removed = self._evict_locked(now)
            if removed:
                logger.debug("cache_evicted", removed=removed)
            self._persist_locked()

    def evict(self) -> int:
        """Remove expired entries, then trim least-recently-used entries.

        Returns:
            Number of entries removed.

        Raises:
            PersistenceError: If entries were removed and the file cannot be written.
        """
        with self._lock:
            removed = self._evict_locked(_now())
            if removed:
                self._persist_locked()
        return removed

    def stats(self) -> CacheStats:
        """Compute statistics over the current entry set."""
        with self._lock:
            entries = self._entries.values()
            hits = self._hits
            misses = self._misses
            attempts = hits + misses
            created = sorted(e.created_at for e in entries if e.created_at)
            stats = CacheStats(
                total_entries=len(self._entries),
                total_hits=hits,
                total_misses=misses,
                hit_rate=hits / attempts if attempts else 0.0,
                total_cost_saved=sum((e.cost or 0.0) * max(e.access_count - 1, 0) for e in entries),
                oldest_entry=created[0] if created else None,
                newest_entry=created[-1] if created else None,
            )

        try:
            stats.cache_size_bytes = self.config.cache_file_path.stat().st_size
        except OSError:
            pass
        return stats

    def clear(self) -> None:
        """Remove all entries and persist the empty cache.

        Raises:
            PersistenceError: If the cache file cannot be written.
        """
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            if self.config.enabled:
                self._persist_locked()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _cleanup_due_locked(self, now: datetime) -> bool:
        if self._last_cleanup is None:
            return True
        interval = timedelta(hours=self.config.cleanup_interval_hours)
        return now - _parse_ts(self._last_cleanup) >= interval

    def _evict_locked(self, now: datetime) -> int:
        before = len(self._entries)

        # max_age_days == 0 disables age-based eviction
        if self.config.max_age_days > 0:
            cutoff = now - timedelta(days=self.config.max_age_days)
            expired = [fp for fp, e in self._entries.items() if _parse_ts(e.created_at) < cutoff]
            for fp in expired:
                del self._entries[fp]

        overflow = len(self._entries) - self.config.max_entries
        if overflow > 0:
            by_access = sorted(self._entries.items(), key=lambda item: _parse_ts(item[1].last_accessed_at))
            for fp, _ in by_access[:overflow]:
                del self._entries[fp]

        self._last_cleanup = now.isoformat()
        return before - len(self._entries)

    def _persist_locked(self) -> None:
        document = CacheDocument(
            config=self.config,
            entries=self._entries,
            total_hits=self._hits,
            total_misses=self._misses,
            last_cleanup=self._last_cleanup,
        )
        write_document(self.config.cache_file_path, document.model_dump_json(indent=2))

    def _persist_quietly_locked(self) -> None:
        try:
            self._persist_locked()
        except PersistenceError as e:
            logger.warning("cache_persist_failed", error=str(e))
