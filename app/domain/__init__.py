"""Domain layer: entities and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import ObjectMetadata
from app.domain.exceptions import (
    FileStashException,
    QuotaExceededError,
    QuotaServiceUnavailableError,
    ValidationException,
)

__all__ = [
    # Entities
    "ObjectMetadata",
    # Exceptions
    "FileStashException",
    "QuotaExceededError",
    "QuotaServiceUnavailableError",
    "ValidationException",
]
