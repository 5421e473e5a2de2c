# managers/memory.py
"""
MemoryGuard: checks process memory after compositions and trims the decode
cache when usage crosses a threshold.
"""
import gc
import logging
import time
from typing import Callable, Optional

import psutil

from .. import config
from ..cache import ImageCache, get_cache

LOGGER = logging.getLogger(__name__)


class MemoryGuard:
    """Keeps decoded assets from growing the process without bound."""

    def __init__(
        self,
        threshold_bytes: int = config.MEMORY_THRESHOLD_BYTES,
        *,
        min_interval_secs: float = 0.0,
        cache_provider: Callable[[], ImageCache] = get_cache,
        rss_reader: Optional[Callable[[], int]] = None,
    ) -> None:
        self.threshold_bytes = threshold_bytes
        self.min_interval_secs = min_interval_secs
        self._cache_provider = cache_provider
        self._rss_reader = rss_reader or self._read_rss
        self._last_cleanup: Optional[float] = None
        self.cleanups = 0

    @staticmethod
    def _read_rss() -> int:
        return psutil.Process().memory_info().rss

    def check(self) -> bool:
        """Trim the cache if memory is above the threshold.

        Returns ``True`` when a cleanup ran.
        """
        try:
            rss = self._rss_reader()
        except psutil.Error as exc:
            LOGGER.warning("Memory check failed: %s", exc)
            return False
        if rss <= self.threshold_bytes:
            return False
        now = time.monotonic()
        if self._last_cleanup is not None and now - self._last_cleanup < self.min_interval_secs:
            return False
        evicted = self._cache_provider().cleanup()
        gc.collect()
        self._last_cleanup = now
        self.cleanups += 1
        LOGGER.info(
            "MemoryGuard: rss %.1f MB over limit, evicted %d cached asset(s)",
            rss / (1 << 20),
            evicted,
        )
        return True
