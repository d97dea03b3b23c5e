"""Shared utilities: datetime, key generators, config value parsers."""

from app.shared.utils.datetime import utc_date_key, utc_now
from app.shared.utils.generators import generate_keys
from app.shared.utils.parsing import parse_inactivity_period, parse_size

__all__ = [
    "generate_keys",
    "parse_inactivity_period",
    "parse_size",
    "utc_date_key",
    "utc_now",
]
