"""Domain entities.

Pure domain models; no persistence concerns.
"""

from app.domain.entities.stored_object import ObjectMetadata

__all__ = ["ObjectMetadata"]
