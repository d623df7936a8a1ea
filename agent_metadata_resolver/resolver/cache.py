"""Tiered caching of resolution results.

Tier 1 is an in-process LRU; tier 2 is any optional ``CacheBackend`` (for
example a shared remote cache). Retention depends on the URI scheme:

- data URIs are a pure function of their text and never expire;
- IPFS/Arweave results expire after ``content_addressed_ttl_seconds``;
- HTTPS results expire after ``https_ttl_seconds``.

Failed resolutions are cached too, so a persistently broken URI is not
re-fetched within its TTL window.
"""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from agent_metadata_resolver.platform.observability import get_logger
from agent_metadata_resolver.resolver.config import ResolverConfig
from agent_metadata_resolver.resolver.result import ResolutionResult
from agent_metadata_resolver.resolver.uri import UriScheme

logger = get_logger(__name__)


@dataclass
class CacheEntry:
    """A cached result with expiration tracking.

    Attributes:
        key: Canonical URI string.
        value: The cached result.
        inserted_at: Unix timestamp when the entry was stored.
        expires_at: Unix timestamp after which the entry is stale; None
            means the entry never expires.
    """

    key: str
    value: ResolutionResult
    inserted_at: float
    expires_at: float | None = None

    def is_expired(self, now: float | None = None) -> bool:
        """Check if this entry has expired."""
        if self.expires_at is None:
            return False
        return (time.time() if now is None else now) > self.expires_at


@runtime_checkable
class CacheBackend(Protocol):
    """Interface for a second cache tier."""

    def get(self, key: str) -> CacheEntry | None:
        """Get an entry, or None if absent."""
        ...

    def set(self, key: str, entry: CacheEntry) -> None:
        """Store an entry."""
        ...

    def invalidate(self, key: str) -> bool:
        """Remove an entry; True if it was present."""
        ...

    def clear(self) -> int:
        """Remove all entries; returns the number removed."""
        ...


class ResultCache:
    """Thread-safe tiered cache for resolution results.

    Every operation on the in-process tier holds a lock, so a ``put`` for a
    key is visible to every later ``get`` for it; concurrent puts for the
    same key race and the last write wins.
    """

    def __init__(
        self,
        max_entries: int = 1024,
        content_addressed_ttl_seconds: float = 3600.0,
        https_ttl_seconds: float = 300.0,
        remote: CacheBackend | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the cache.

        Args:
            max_entries: Capacity of the in-process tier; least recently used
                entries are evicted first.
            content_addressed_ttl_seconds: TTL for IPFS/Arweave results.
            https_ttl_seconds: TTL for HTTPS results.
            remote: Optional second tier consulted on in-process misses.
            clock: Time source, in seconds.
        """
        self.max_entries = max_entries
        self.content_addressed_ttl_seconds = content_addressed_ttl_seconds
        self.https_ttl_seconds = https_ttl_seconds
        self._remote = remote
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    @classmethod
    def from_config(cls, config: ResolverConfig, remote: CacheBackend | None = None) -> "ResultCache":
        return cls(
            max_entries=config.cache_max_entries,
            content_addressed_ttl_seconds=config.content_addressed_ttl_seconds,
            https_ttl_seconds=config.https_ttl_seconds,
            remote=remote,
        )

    def ttl_for(self, scheme: UriScheme) -> float | None:
        """Retention for results of a scheme; None means no expiry."""
        if scheme in (UriScheme.IPFS, UriScheme.ARWEAVE):
            return self.content_addressed_ttl_seconds
        if scheme == UriScheme.HTTPS:
            return self.https_ttl_seconds
        # data and malformed results depend only on the URI text
        return None

    def get(self, key: str) -> CacheEntry | None:
        """Get a live entry, consulting the remote tier on a local miss.

        Args:
            key: Canonical URI string.

        Returns:
            The entry if present and not expired, None otherwise.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                if entry.is_expired(now):
                    del self._entries[key]
                else:
                    self._entries.move_to_end(key)
                    self._hits += 1
                    return entry

        entry = self._get_remote(key, now)
        with self._lock:
            if entry is None:
                self._misses += 1
                return None
            self._hits += 1
            self._store(entry)
        return entry

    def _get_remote(self, key: str, now: float) -> CacheEntry | None:
        if self._remote is None:
            return None
        entry = self._remote.get(key)
        if entry is None:
            return None
        if entry.is_expired(now):
            self._remote.invalidate(key)
            return None
        return entry

    def put(self, key: str, result: ResolutionResult) -> CacheEntry:
        """Store a result under its canonical key.

        The retention period is chosen from ``result.scheme``.

        Args:
            key: Canonical URI string.
            result: The result to cache.

        Returns:
            The stored entry.
        """
        now = self._clock()
        ttl = self.ttl_for(result.scheme)
        entry = CacheEntry(
            key=key,
            value=result,
            inserted_at=now,
            expires_at=None if ttl is None else now + ttl,
        )
        with self._lock:
            self._store(entry)
        if self._remote is not None:
            self._remote.set(key, entry)
        return entry

    def _store(self, entry: CacheEntry) -> None:
        # Caller holds the lock
        self._entries[entry.key] = entry
        self._entries.move_to_end(entry.key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            self._evictions += 1
            logger.debug("cache_entry_evicted", key=evicted[:128])

    def invalidate(self, key: str) -> bool:
        """Remove an entry from every tier.

        Returns:
            True if the entry was present in any tier.
        """
        with self._lock:
            found = self._entries.pop(key, None) is not None
        if self._remote is not None:
            found = self._remote.invalidate(key) or found
        return found

    def clear(self) -> int:
        """Clear all entries from every tier."""
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        if self._remote is not None:
            count += self._remote.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def stats(self) -> dict[str, Any]:
        with self._lock:
            total = self._hits + self._misses
            return {
                "size": len(self._entries),
                "maxsize": self.max_entries,
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "hit_rate": self._hits / total if total else 0.0,
            }
