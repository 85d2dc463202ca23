"""Models package for database models."""

from app.models.temple import Temple

__all__ = [
    "Temple",
]
