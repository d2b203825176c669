"""
Shared Result Cache for YouTube Comment Sentiment Analysis
Process-wide, in-memory store of finished analyses with a fixed TTL
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60


@dataclass(frozen=True)
class CacheEntry:
    """A stored analysis and the moment it was stored"""

    key: str
    result: Any
    timestamp: float


class ResultCache:
    """
    In-memory analysis cache

    Entries older than the TTL are reported as absent by ``lookup`` but stay
    in the mapping until a later ``store`` replaces them. Stores under the
    same key are last-write-wins.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize result cache

        Args:
            ttl_seconds: Freshness window of an entry
            clock: Source of the current time in seconds (injectable for tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

        logger.info(f"✅ ResultCache initialized: ttl={ttl_seconds}s")

    def lookup(self, key: str) -> Optional[Any]:
        """
        Get a fresh result

        Args:
            key: Namespaced cache key

        Returns:
            Cached result, or None when missing or stale
        """
        with self._lock:
            entry = self._entries.get(key)

        if entry is None:
            return None

        if self._clock() - entry.timestamp > self.ttl_seconds:
            logger.debug(f"Stale cache entry ignored: {key}")
            return None

        return entry.result

    def store(self, key: str, result: Any) -> None:
        """
        Store a result, replacing any previous entry for the key

        Args:
            key: Namespaced cache key
            result: Analysis result
        """
        entry = CacheEntry(key=key, result=result, timestamp=self._clock())
        with self._lock:
            self._entries[key] = entry

    def clear(self) -> None:
        """Drop every entry"""
        with self._lock:
            self._entries.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics

        Returns:
            Dictionary with entry counts and TTL
        """
        now = self._clock()
        with self._lock:
            entries = list(self._entries.values())

        fresh = [e for e in entries if now - e.timestamp <= self.ttl_seconds]
        return {
            "entries": len(entries),
            "fresh_entries": len(fresh),
            "stale_entries": len(entries) - len(fresh),
            "video_entries": sum(1 for e in entries if e.key.startswith("video_")),
            "channel_entries": sum(1 for e in entries if e.key.startswith("channel_")),
            "ttl_seconds": self.ttl_seconds,
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


# ============================================================================
# Global Singleton Instance
# ============================================================================

_result_cache: Optional[ResultCache] = None
_cache_lock = threading.Lock()


def get_result_cache(ttl_seconds: Optional[int] = None) -> ResultCache:
    """
    Get or create the process-wide result cache (Singleton)

    Args:
        ttl_seconds: TTL used when the cache is first created
            (defaults to the configured analysis TTL)

    Returns:
        ResultCache instance
    """
    global _result_cache

    if _result_cache is None:
        with _cache_lock:
            if _result_cache is None:
                if ttl_seconds is None:
                    from yt_sentiment.app.config import get_config

                    ttl_seconds = get_config().cache.analysis_ttl_seconds
                _result_cache = ResultCache(ttl_seconds=ttl_seconds)

    return _result_cache


def reset_result_cache() -> None:
    """Reset global cache instance (useful for testing)"""
    global _result_cache

    with _cache_lock:
        _result_cache = None
