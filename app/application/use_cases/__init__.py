"""Application use cases: one entry point per workflow."""

from app.application.use_cases.cleanup import CleanupScheduler

__all__ = [
    "CleanupScheduler",
]
