"""Thread-safe LRU cache for decoded image assets.

Decodes run on worker threads, so every access goes through a lock.  Entries
are keyed by a content hash, which lets identical photos share a decode
across compositions.  The module keeps one lazily created cache instance;
:func:`configure_cache` and :func:`override_cache` swap it for tests or for
callers that need different limits.
"""

from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from threading import RLock
from typing import Any, Callable, Iterator, Optional, Tuple

from . import config


class ImageCache:
    """LRU cache of ``key -> (value, metadata)`` pairs."""

    def __init__(
        self,
        max_size: int = config.MAX_CACHE_SIZE,
        cleanup_threshold: float = config.CACHE_CLEANUP_THRESHOLD,
    ) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be greater than zero")
        self.max_size = max_size
        self.cleanup_threshold = cleanup_threshold
        self._entries: "OrderedDict[str, Tuple[Any, dict]]" = OrderedDict()
        self._lock = RLock()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def get(self, key: str) -> Tuple[Optional[Any], Optional[dict]]:
        """Return ``(value, metadata)`` for *key* or ``(None, None)``.

        A hit marks the entry as most recently used.
        """
        with self._lock:
            try:
                entry = self._entries.pop(key)
            except KeyError:
                self.misses += 1
                return None, None
            self._entries[key] = entry
            self.hits += 1
            return entry

    def put(self, key: str, value: Any, metadata: Optional[dict] = None) -> None:
        """Store *value*, evicting old entries once the threshold is reached."""
        with self._lock:
            if key in self._entries:
                self._entries.pop(key)
            elif len(self._entries) >= self.max_size * self.cleanup_threshold:
                self._evict_to(max(self.max_size // 2, 1))
            self._entries[key] = (value, metadata or {})

    def cleanup(self) -> int:
        """Evict least recently used entries down to half capacity.

        Returns the number of evicted entries.
        """
        with self._lock:
            return self._evict_to(max(self.max_size // 2, 1))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict_to(self, target: int) -> int:
        evicted = 0
        while len(self._entries) > target:
            self._entries.popitem(last=False)
            evicted += 1
        return evicted


_cache_lock = RLock()
_cache_factory: Callable[[], ImageCache] = ImageCache
_cache_instance: Optional[ImageCache] = None


def configure_cache(factory: Callable[[], ImageCache], *, reset: bool = True) -> None:
    """Set the factory used to build the shared cache on first use."""

    if not callable(factory):
        raise TypeError("factory must be callable")
    global _cache_factory, _cache_instance
    with _cache_lock:
        _cache_factory = factory
        if reset:
            _cache_instance = None


def get_cache() -> ImageCache:
    """Return the shared cache, creating it if needed."""

    global _cache_instance
    with _cache_lock:
        if _cache_instance is None:
            _cache_instance = _cache_factory()
        return _cache_instance


@contextmanager
def override_cache(cache: ImageCache) -> Iterator[ImageCache]:
    """Use *cache* as the shared cache inside a ``with`` block."""

    global _cache_factory, _cache_instance
    with _cache_lock:
        previous = (_cache_factory, _cache_instance)

        def _factory() -> ImageCache:
            return cache

        _cache_factory = _factory
        _cache_instance = cache
    try:
        yield cache
    finally:
        with _cache_lock:
            _cache_factory, _cache_instance = previous


__all__ = ["ImageCache", "configure_cache", "get_cache", "override_cache"]
