"""Cleanup use cases: scheduled eviction of inactive files."""

from app.application.use_cases.cleanup.cleanup_scheduler import (
    CleanupScheduler,
    SchedulerState,
)

__all__ = ["CleanupScheduler", "SchedulerState"]
