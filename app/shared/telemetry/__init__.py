"""Shared telemetry: logging setup."""

from app.shared.telemetry.logging import setup_logging

__all__ = ["setup_logging"]
