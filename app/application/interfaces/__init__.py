"""Application interfaces (protocols) for infrastructure collaborators."""

from app.application.interfaces.services import ICounterStore

__all__ = ["ICounterStore"]
