import logging

import psutil

from photostrip.cache import ImageCache
from photostrip.managers import MemoryGuard


def _filled_cache(count: int = 8) -> ImageCache:
    cache = ImageCache(max_size=8, cleanup_threshold=1.0)
    for i in range(count):
        cache.put(str(i), i)
    return cache


def test_guard_below_threshold_does_nothing():
    cache = _filled_cache()
    guard = MemoryGuard(1000, cache_provider=lambda: cache, rss_reader=lambda: 10)
    assert guard.check() is False
    assert len(cache) == 8
    assert guard.cleanups == 0


def test_guard_trims_cache_over_threshold(caplog):
    cache = _filled_cache()
    guard = MemoryGuard(1000, cache_provider=lambda: cache, rss_reader=lambda: 5000)
    with caplog.at_level(logging.INFO, logger="photostrip.managers.memory"):
        assert guard.check() is True
    assert len(cache) == 4
    assert guard.cleanups == 1
    assert "MemoryGuard" in caplog.text


def test_guard_respects_min_interval():
    cache = _filled_cache()
    guard = MemoryGuard(1000, min_interval_secs=3600, cache_provider=lambda: cache, rss_reader=lambda: 5000)
    assert guard.check() is True
    assert guard.check() is False
    assert guard.cleanups == 1


def test_guard_survives_psutil_errors(caplog):
    def broken_reader() -> int:
        raise psutil.AccessDenied()

    guard = MemoryGuard(1000, cache_provider=_filled_cache, rss_reader=broken_reader)
    with caplog.at_level(logging.WARNING):
        assert guard.check() is False
    assert "Memory check failed" in caplog.text


def test_default_reader_uses_process_rss():
    guard = MemoryGuard(threshold_bytes=1 << 62, cache_provider=_filled_cache)
    assert guard.check() is False
