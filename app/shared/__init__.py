"""Shared utilities: telemetry and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import (
    generate_keys,
    parse_inactivity_period,
    parse_size,
    utc_date_key,
    utc_now,
)

__all__ = [
    "generate_keys",
    "parse_inactivity_period",
    "parse_size",
    "utc_date_key",
    "utc_now",
]
