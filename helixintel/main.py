"""HelixIntel - home maintenance schedules, tasks and analytics."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from helixintel import __version__
from helixintel.core.cache_client import InMemoryCache
from helixintel.core.clock import Clock, SystemClock
from helixintel.core.config import Settings, constants, settings
from helixintel.core.errors import HelixIntelError, PersistenceError
from helixintel.core.logging import configure_logfire, instrument_fastapi
from helixintel.core.scheduler import create_scheduler
from helixintel.core.sqlite_store import SQLiteMaintenanceStore
from helixintel.interface.api_router import helixintel_error_handler, router, templates_router
from helixintel.modules.schedules.engine import ScheduleEngine


logger = logging.getLogger(__name__)


def create_app(app_settings: Settings | None = None, *, clock: Clock | None = None) -> FastAPI:
    """Build the FastAPI application.

    The store, cache, scheduler and engine are created in the lifespan and
    kept on ``app.state``; nothing is shared between app instances.
    """
    active_settings = app_settings or settings
    active_clock = clock or SystemClock()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Application lifespan context manager."""
        # Startup
        # Configure logging first so startup logs are captured
        configure_logfire(active_settings)

        store = SQLiteMaintenanceStore(db_path=active_settings.sqlite_db_path, clock=active_clock)
        await store.open()
        logger.info("Database initialized")

        cache = InMemoryCache(default_ttl_seconds=active_settings.schedule_cache_ttl_seconds)
        scheduler = create_scheduler(cache=cache, interval_seconds=active_settings.cache_cleanup_interval_seconds)
        scheduler.start()

        app.state.store = store
        app.state.cache = cache
        app.state.engine = ScheduleEngine(store, active_clock)
        try:
            yield
        finally:
            # Shutdown
            scheduler.shutdown(wait=False)
            cache.close()
            await store.close()
            logger.info("Shutdown complete")

    app = FastAPI(
        title="helixintel",
        description="Recurring home maintenance schedules and tasks",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = active_settings

    # Instrument FastAPI with Logfire
    instrument_fastapi(app)

    app.add_exception_handler(HelixIntelError, helixintel_error_handler)
    app.add_exception_handler(PersistenceError, helixintel_error_handler)

    # Register routers
    app.include_router(router)
    app.include_router(templates_router)

    @app.get("/health")
    async def health_check() -> JSONResponse:
        """Health check endpoint with cache statistics."""
        cache: InMemoryCache | None = getattr(app.state, "cache", None)
        if cache is None or cache.is_closed:
            return JSONResponse(content={"status": "starting"}, status_code=503)
        stats = cache.get_stats()
        return JSONResponse(
            content={"status": "healthy", "cache": {"size": stats.size, "hits": stats.hits, "misses": stats.misses}},
            status_code=constants.HTTP_OK,
        )

    return app


app = create_app()
