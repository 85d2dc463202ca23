"""Request schemas."""

from app.schemas.temple import (
    CeremonyIn,
    EventIn,
    GalleryImageDelete,
    TempleCreate,
    TempleListQuery,
    TemplePatch,
)

__all__ = [
    "CeremonyIn",
    "EventIn",
    "GalleryImageDelete",
    "TempleCreate",
    "TempleListQuery",
    "TemplePatch",
]
