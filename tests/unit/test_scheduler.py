"""Unit tests for the background cache cleanup job."""

import pytest

from helixintel.core.cache_client import InMemoryCache
from helixintel.core.scheduler import CACHE_CLEANUP_JOB_ID, create_scheduler, purge_expired_cache_entries


@pytest.mark.unit
class TestPurgeExpiredCacheEntries:
    """Tests for purge_expired_cache_entries function."""

    def test_removes_expired(self):
        now = [0.0]
        cache = InMemoryCache(time_func=lambda: now[0])
        cache.set("old", 1, ttl_seconds=1)
        cache.set("fresh", 2, ttl_seconds=100)
        now[0] = 10.0

        purge_expired_cache_entries(cache)

        assert cache.get_stats().keys == ["fresh"]

    def test_closed_cache_is_skipped(self):
        cache = InMemoryCache()
        cache.close()

        purge_expired_cache_entries(cache)

        assert cache.is_closed

    def test_failure_is_logged_not_raised(self, monkeypatch, caplog):
        cache = InMemoryCache()

        def boom() -> int:
            msg = "lock poisoned"
            raise RuntimeError(msg)

        monkeypatch.setattr(cache, "cleanup_expired", boom)

        purge_expired_cache_entries(cache)

        assert any("Cache cleanup job failed" in record.message for record in caplog.records)


@pytest.mark.unit
class TestCreateScheduler:
    """Tests for create_scheduler function."""

    def test_registers_cleanup_job(self):
        scheduler = create_scheduler(cache=InMemoryCache(), interval_seconds=30)

        job = scheduler.get_job(CACHE_CLEANUP_JOB_ID)

        assert job is not None
        assert job.name == "Purge Expired Cache Entries"
        assert job.trigger.interval.total_seconds() == 30
        assert not scheduler.running
