"""Services package."""

from app.services.media_service import CloudinaryMediaStore, MediaLifecycle, MediaUpload, StoredAsset
from app.services.temple_repository import TempleRepository
from app.services.temple_service import TempleService
from app.services.uniqueness_guard import UniquenessGuard

__all__ = [
    "CloudinaryMediaStore",
    "MediaLifecycle",
    "MediaUpload",
    "StoredAsset",
    "TempleRepository",
    "TempleService",
    "UniquenessGuard",
]
