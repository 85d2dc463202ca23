"""
Media Cleanup Worker.

Deletes remote assets that a temple no longer references (replaced cover
images, removed gallery images). The temple row is already committed when
this runs, so failures are retried and finally logged, never surfaced.
"""

import logging

from app.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def delete_remote_asset(self, public_id: str, kind: str = "image"):
    """Delete one Cloudinary asset, retrying with exponential backoff."""
    from app.services.media_service import CloudinaryMediaStore

    try:
        CloudinaryMediaStore().delete_sync(public_id, kind)
        logger.info(f"Deleted remote asset {public_id}", extra={"public_id": public_id})
        return {"deleted": public_id}
    except Exception as e:
        if self.request.retries >= self.max_retries:
            logger.warning(
                f"Giving up deleting remote asset {public_id}: {e}",
                extra={"public_id": public_id},
            )
            return {"deleted": None, "public_id": public_id, "error": str(e)}
        logger.warning(f"Remote asset deletion failed for {public_id}, retrying: {e}")
        raise self.retry(exc=e, countdown=30 * (2 ** self.request.retries))
