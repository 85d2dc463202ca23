"""
Media Service - temple images on Cloudinary.

Sequences uploads and deletions against the media store:
- cover image uploads are all-or-nothing,
- gallery batches succeed partially,
- deletions of replaced/removed assets are best-effort and never fail
  the operation that triggered them.
"""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Sequence
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader

from app.config import settings
from app.exceptions import InvalidInput, UpstreamFailure

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp", ".tiff", ".svg"}


class MediaStoreError(Exception):
    """Raised by a media store when an upload or deletion fails."""


@dataclass
class MediaUpload:
    """A file handed to the registry: original filename plus a path or file object."""
    filename: str
    content: Any


@dataclass(frozen=True)
class StoredAsset:
    url: str
    public_id: Optional[str] = None

    def to_entry(self) -> dict:
        return {"url": self.url, "public_id": self.public_id}


@dataclass
class BatchResult:
    added: List[StoredAsset] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def urls(self) -> List[str]:
        return [asset.url for asset in self.added]


class MediaStore(Protocol):
    async def upload(self, upload: MediaUpload) -> StoredAsset: ...

    async def delete(self, public_id: str, kind: str = "image") -> None: ...


def public_id_from_url(url: str) -> Optional[str]:
    """
    Derive a Cloudinary public id from a delivery URL.

    Only the final path segment is used, so ids inside folders cannot be
    recovered this way. Used for gallery entries stored without an id.
    """
    path = urlparse(url or "").path
    segment = path.rstrip("/").rsplit("/", 1)[-1]
    if not segment:
        return None
    stem, _ext = os.path.splitext(segment)
    return stem or None


@lru_cache
def configure_cloudinary() -> bool:
    """Configure the Cloudinary SDK once per process."""
    if not settings.cloudinary_configured:
        logger.warning(
            "Cloudinary settings missing. Set CLOUDINARY_CLOUD_NAME, "
            "CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET."
        )
        return False
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )
    return True


class CloudinaryMediaStore:
    """MediaStore backed by the Cloudinary SDK (blocking calls run in threads)."""

    def __init__(self, folder: Optional[str] = None):
        self.folder = folder or settings.cloudinary_folder
        configure_cloudinary()

    def upload_sync(self, upload: MediaUpload) -> StoredAsset:
        response = cloudinary.uploader.upload(
            upload.content,
            resource_type="image",
            folder=self.folder,
        )
        url = response.get("secure_url")
        public_id = response.get("public_id")
        if not url or not public_id:
            raise MediaStoreError(f"Cloudinary upload returned no URL for {upload.filename}")
        return StoredAsset(url=url, public_id=public_id)

    def delete_sync(self, public_id: str, kind: str = "image") -> None:
        response = cloudinary.uploader.destroy(public_id, resource_type=kind)
        result = (response or {}).get("result")
        if result not in ("ok", "not found"):
            raise MediaStoreError(f"Cloudinary destroy of {public_id} returned {result!r}")

    async def upload(self, upload: MediaUpload) -> StoredAsset:
        return await asyncio.to_thread(self.upload_sync, upload)

    async def delete(self, public_id: str, kind: str = "image") -> None:
        await asyncio.to_thread(self.delete_sync, public_id, kind)


CleanupHandler = Callable[[str, str], Awaitable[None]]


class MediaLifecycle:
    """
    Coordinates a temple operation's uploads and deletions.

    One instance per request. Best-effort failures are logged and collected
    in `warnings` so the operation can report them.
    """

    def __init__(self, store: MediaStore, cleanup: Optional[CleanupHandler] = None):
        self.store = store
        self.cleanup = cleanup
        self.warnings: List[str] = []

    # --- Validation ---

    @staticmethod
    def validate(uploads: Sequence[MediaUpload]) -> None:
        """Reject non-image files before anything is sent to the store."""
        for upload in uploads:
            ext = os.path.splitext(upload.filename or "")[1].lower()
            if ext not in ALLOWED_IMAGE_EXTENSIONS:
                raise InvalidInput(
                    f"Unsupported image type for '{upload.filename}'. "
                    f"Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}",
                    field="file",
                )

    # --- Uploads ---

    async def upload_cover(self, upload: Optional[MediaUpload]) -> StoredAsset:
        """Upload a cover image. Any failure is fatal to the caller."""
        if upload is None:
            raise InvalidInput("Please upload a cover image.", field="coverImage")
        self.validate([upload])
        try:
            return await self.store.upload(upload)
        except Exception as e:
            logger.error(f"Cover image upload failed for {upload.filename}: {e}", exc_info=True)
            raise UpstreamFailure("Failed to upload cover image") from e

    async def upload_batch(
        self,
        uploads: Sequence[MediaUpload],
        require_any: bool = True,
    ) -> BatchResult:
        """
        Upload gallery images concurrently, keeping input order.

        A failed file does not abort the others. With `require_any`, the
        batch fails only when every upload failed.
        """
        self.validate(uploads)
        outcomes = await asyncio.gather(
            *(self.store.upload(upload) for upload in uploads),
            return_exceptions=True,
        )

        batch = BatchResult()
        for upload, outcome in zip(uploads, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Error uploading gallery image {upload.filename}: {outcome}")
                batch.failed.append(upload.filename)
            else:
                batch.added.append(outcome)

        if batch.failed:
            self.warnings.append(
                f"Failed to upload {len(batch.failed)} of {len(uploads)} gallery image(s): "
                + ", ".join(batch.failed)
            )
        if require_any and uploads and not batch.added:
            raise UpstreamFailure("Failed to upload any gallery images")
        return batch

    # --- Deletions ---

    async def discard(self, asset: StoredAsset, kind: str = "image") -> None:
        """Best-effort removal of a remote asset. Never raises."""
        public_id = asset.public_id or public_id_from_url(asset.url)
        if not public_id:
            self._warn(f"Could not determine media id for {asset.url}; remote copy kept.")
            return

        if self.cleanup is not None:
            try:
                await self.cleanup(public_id, kind)
                return
            except Exception as e:
                logger.warning(
                    f"Could not hand off deletion of {public_id}, deleting inline: {e}",
                    extra={"public_id": public_id},
                )

        try:
            await self.store.delete(public_id, kind)
            logger.info(f"Deleted remote asset {public_id}", extra={"public_id": public_id})
        except Exception as e:
            self._warn(f"Failed to delete remote asset {public_id}: {e}", public_id=public_id)

    async def discard_all(self, assets: Sequence[StoredAsset]) -> None:
        for asset in assets:
            await self.discard(asset)

    def _warn(self, message: str, public_id: Optional[str] = None) -> None:
        logger.warning(message, extra={"public_id": public_id})
        self.warnings.append(message)


async def enqueue_asset_cleanup(public_id: str, kind: str = "image") -> None:
    """Cleanup handler that defers deletion to the Celery worker."""
    from app.workers.media_cleanup import delete_remote_asset

    await asyncio.to_thread(delete_remote_asset.delay, public_id, kind)
    logger.info(f"Queued remote deletion of {public_id}", extra={"public_id": public_id})


def get_media_lifecycle() -> MediaLifecycle:
    """Dependency: a fresh coordinator per request."""
    cleanup = enqueue_asset_cleanup if settings.media_cleanup_via_worker else None
    return MediaLifecycle(CloudinaryMediaStore(), cleanup=cleanup)
