"""Run one eviction sweep: delete files not accessed within the inactivity period.

Usage:
    python -m scripts.run_cleanup [period]
period overrides INACTIVITY_PERIOD (e.g. 30d, 12h, 90m). Uses the storage
backend selected by PROVIDER / FOLDER / CONFIG. Exits 1 if any object
could not be processed.
"""

import asyncio
import sys

from app.application.services.file_service import FileService
from app.core.config import get_settings
from app.shared.telemetry import setup_logging


async def main() -> int:
    """Sweep once and print a summary."""
    settings = get_settings()
    setup_logging()
    period = sys.argv[1] if len(sys.argv) > 1 else settings.inactivity_period

    file_service = FileService.from_settings(settings)
    result = await file_service.cleanup_inactive_files(period)

    print(f"Done. Deleted: {result.deleted_count}, errors: {result.error_count}")
    for error in result.errors:
        print(f"  {error.file}: {error.error}", file=sys.stderr)
    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
