"""Application lifespan: startup and shutdown.

Single place for all startup/shutdown logic. Used by main.py; no business
logic here, only wiring of the storage facade, the quota counter store and
the eviction scheduler onto app.state.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.application.services.file_service import FileService
from app.application.services.quota_service import QuotaService
from app.application.use_cases.cleanup import CleanupScheduler
from app.core.config import get_settings
from app.infrastructure.cache.redis_counter import RedisCounterStore
from app.shared.telemetry import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Startup order: logging, storage facade, Redis counter store, quota
    service, cleanup scheduler (if enabled; runs one sweep before serving).
    Shutdown order: scheduler stop, Redis disconnect.
    """
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    file_service = FileService.from_settings(settings)
    app.state.file_service = file_service
    logger.info("Storage provider: %s", settings.storage_provider)

    counter_store = RedisCounterStore()
    await counter_store.connect()
    app.state.counter_store = counter_store
    app.state.quota_service = QuotaService.from_settings(counter_store, settings)

    if settings.cleanup_enabled:
        scheduler = CleanupScheduler(
            file_service,
            interval_seconds=settings.cleanup_interval_seconds,
            inactivity_period=settings.inactivity_period,
        )
        await scheduler.start()
        app.state.cleanup_scheduler = scheduler
    else:
        app.state.cleanup_scheduler = None
        logger.info("Cleanup scheduler disabled")

    yield

    # ---- Shutdown ----
    scheduler = getattr(app.state, "cleanup_scheduler", None)
    if scheduler is not None:
        scheduler.stop()
        await scheduler.wait_for_sweeps()

    if getattr(app.state, "counter_store", None) is not None:
        await app.state.counter_store.disconnect()
