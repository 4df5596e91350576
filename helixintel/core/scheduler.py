"""Background job scheduler.

The only periodic job purges expired cache entries. Due dates need no timer:
overdue status is derived when tasks are read.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from helixintel.core.cache_client import InMemoryCache


logger = logging.getLogger(__name__)

CACHE_CLEANUP_JOB_ID = "cache_cleanup"


def purge_expired_cache_entries(cache: InMemoryCache) -> None:
    """Job body: drop expired entries from the cache."""
    if cache.is_closed:
        return
    try:
        cache.cleanup_expired()
    except Exception:
        logger.exception("Cache cleanup job failed")


def create_scheduler(*, cache: InMemoryCache, interval_seconds: int) -> AsyncIOScheduler:
    """Build a scheduler with the cache cleanup job registered (not yet started).

    Start it from the FastAPI lifespan with ``scheduler.start()`` and stop it
    with ``scheduler.shutdown()``.
    """
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        purge_expired_cache_entries,
        trigger=IntervalTrigger(seconds=interval_seconds),
        args=[cache],
        id=CACHE_CLEANUP_JOB_ID,
        name="Purge Expired Cache Entries",
        replace_existing=True,
    )
    logger.info("Scheduled cache cleanup job: every %ds", interval_seconds)
    return scheduler
