"""
Temple Service - registration and upkeep of temple records.

Composes the uniqueness guard, partial-update merger, sub-collection
operations, media lifecycle and verification workflow over one temple
per call. Every mutating operation takes the caller explicitly.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import asc, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.exceptions import InvalidInput, NotFound, TempleError, Unauthorized
from app.fsm.verification import VerificationWorkflow
from app.models.temple import Temple
from app.redis import cache_delete, cache_get_json, cache_set_json
from app.schemas.caller import Caller
from app.schemas.temple import CeremonyIn, EventIn, TempleCreate, TempleListQuery, TemplePatch
from app.services import subcollections
from app.services.media_service import (
    BatchResult,
    MediaLifecycle,
    MediaUpload,
    StoredAsset,
    get_media_lifecycle,
)
from app.services.slug import temple_slug
from app.services.temple_merger import merge, proposed_values
from app.services.temple_repository import TempleRepository, parse_temple_id
from app.services.uniqueness_guard import UniquenessGuard

logger = logging.getLogger(__name__)

PUBLIC_CARDS_CACHE_KEY = "devalaya:temples:public-cards"

PUBLIC_CARD_FIELDS = (
    "templeName",
    "location.city",
    "location.state",
    "description",
    "coverImage",
    "slug",
)

SORTABLE_FIELDS = {
    "createdAt": Temple.created_at,
    "updatedAt": Temple.updated_at,
    "templeName": Temple.temple_name,
    "location.city": Temple.location_city,
    "location.state": Temple.location_state,
    "isVerified": Temple.is_verified,
    "slug": Temple.slug,
}

NESTED_DOCUMENT_KEYS = {
    "location": {"address", "city", "state", "country"},
    "darshanTimings": {"morning", "evening"},
    "contactDetails": {"email", "phone", "facebook", "instagram", "website"},
}

DOCUMENT_KEYS = {
    "id", "templeName", "slug", "location", "description", "history",
    "darshanTimings", "activitiesAndServices", "contactDetails", "coverImage",
    "photoGallery", "specialCeremonies", "upcomingEvents", "isVerified",
    "verifiedBy", "verificationRemarks", "registeredBy", "createdAt", "updatedAt",
}


def parse_fields(fields: Optional[str]) -> List[str]:
    """Parse a comma-separated projection, rejecting unknown paths."""
    if not fields:
        return []
    paths = [part.strip() for part in fields.split(",") if part.strip()]
    for path in paths:
        head, _, tail = path.partition(".")
        if head not in DOCUMENT_KEYS or (tail and tail not in NESTED_DOCUMENT_KEYS.get(head, ())):
            raise InvalidInput(f"Unknown field '{path}' in projection", field="fields")
    return paths


def project(document: Dict[str, Any], paths: Sequence[str]) -> Dict[str, Any]:
    """Keep only `paths` (dotted for nested keys) plus the id."""
    projected: Dict[str, Any] = {"id": document["id"]}
    for path in paths:
        head, _, tail = path.partition(".")
        if not tail:
            projected[head] = document[head]
        else:
            nested = projected.setdefault(head, {})
            nested[tail] = document[head][tail]
    return projected


def _contains(column, text: str):
    """Case-insensitive substring match with LIKE wildcards escaped."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return column.ilike(f"%{escaped}%", escape="\\")


class TempleService:
    """Service for the temple registry."""

    def __init__(
        self,
        db: AsyncSession,
        media: Optional[MediaLifecycle] = None,
        workflow: Optional[VerificationWorkflow] = None,
    ):
        self.db = db
        self.repo = TempleRepository(db)
        self.guard = UniquenessGuard(self.repo)
        self.workflow = workflow or VerificationWorkflow()
        self._media = media

    @property
    def media(self) -> MediaLifecycle:
        if self._media is None:
            self._media = get_media_lifecycle()
        return self._media

    @property
    def warnings(self) -> List[str]:
        return list(self._media.warnings) if self._media else []

    # --- Create / update ---

    async def create_temple(
        self,
        caller: Caller,
        payload: TempleCreate,
        cover_image: Optional[MediaUpload],
        gallery: Sequence[MediaUpload] = (),
    ) -> Temple:
        """
        Register a temple.

        Checks run before any upload so a rejected creation never leaves
        orphaned images behind. The cover image upload is mandatory; gallery
        uploads that fail are skipped.
        """
        self.workflow.ensure_can_register(caller)
        if cover_image is None:
            raise InvalidInput("Please upload a cover image.", field="coverImage")
        self.media.validate([cover_image, *gallery])

        contact = payload.contact_details
        violation = await self.guard.check_create_conflicts(
            payload.temple_name, payload.location.city, contact.email, contact.phone
        )
        if violation:
            raise violation.to_error()

        cover = await self.media.upload_cover(cover_image)
        batch = (
            await self.media.upload_batch(gallery, require_any=False) if gallery else BatchResult()
        )

        location = payload.location
        timings = payload.darshan_timings
        temple = Temple(
            temple_name=payload.temple_name,
            slug=temple_slug(payload.temple_name),
            location_address=location.address,
            location_city=location.city,
            location_state=location.state,
            location_country=location.country,
            description=payload.description,
            history=payload.history,
            activities_and_services=payload.activities_and_services,
            darshan_morning=timings.morning,
            darshan_evening=timings.evening,
            contact_email=contact.email,
            contact_phone=contact.phone,
            contact_facebook=contact.facebook,
            contact_instagram=contact.instagram,
            contact_website=contact.website,
            cover_image=cover.url,
            cover_image_public_id=cover.public_id,
            photo_gallery=[asset.to_entry() for asset in batch.added],
            special_ceremonies=[c.to_item() for c in payload.special_ceremonies],
            upcoming_events=[e.to_item() for e in payload.upcoming_events],
            registered_by=caller.actor_id,
            **self.workflow.initial_fields(caller, payload.verification_remarks),
        )

        try:
            await self.repo.create(temple)
        except TempleError:
            await self.media.discard_all([cover, *batch.added])
            raise

        logger.info(
            f"Temple registered: {temple.temple_name} ({temple.location_city}), "
            f"verified={temple.is_verified}",
            extra={"temple_id": temple.id, "actor_id": caller.actor_id},
        )
        await self._invalidate_public_cards()
        return temple

    async def update_temple(
        self,
        caller: Caller,
        temple_id: Any,
        patch: TemplePatch,
    ) -> Tuple[Temple, Dict[str, Any]]:
        """Apply a sparse patch. Returns the temple and the changed fields."""
        temple = await self._load_for_edit(caller, temple_id)

        verification = self.workflow.plan_patch(temple, caller, patch)
        proposed = proposed_values(temple, patch)
        violation = await self.guard.check_update_conflicts(
            temple,
            temple_name=proposed["temple_name"],
            city=proposed["location_city"],
            email=proposed["contact_email"],
            phone=proposed["contact_phone"],
        )
        if violation:
            raise violation.to_error()

        temple, changed = merge(temple, patch)
        changed.update(self.workflow.apply(temple, verification))

        if changed:
            await self.repo.save(temple)
            logger.info(
                f"Temple updated: {', '.join(sorted(changed))}",
                extra={"temple_id": temple.id, "actor_id": caller.actor_id},
            )
            await self._invalidate_public_cards()
        return temple, changed

    # --- Reads ---

    async def get_temple_for_admin(self, caller: Caller) -> Temple:
        """The temple registered by the calling admin."""
        if caller is None:
            raise Unauthorized("Authentication required.")
        temples = await self.repo.find(
            Temple.registered_by == caller.actor_id,
            order_by=[Temple.created_at],
            limit=1,
        )
        if not temples:
            raise NotFound("Temple not found for this admin")
        return temples[0]

    async def get_public_cards(self) -> List[Dict[str, Any]]:
        """Card view of every verified temple."""
        ttl = settings.public_cards_cache_ttl
        if ttl > 0:
            cached = await cache_get_json(PUBLIC_CARDS_CACHE_KEY)
            if cached is not None:
                return cached

        temples = await self.repo.find(Temple.is_verified.is_(True), order_by=[Temple.created_at])
        cards = [project(t.to_document(), PUBLIC_CARD_FIELDS) for t in temples]

        if ttl > 0:
            await cache_set_json(PUBLIC_CARDS_CACHE_KEY, cards, ttl)
        return cards

    async def list_temples(self, query: TempleListQuery) -> Dict[str, Any]:
        """Filtered, sorted, paginated listing with optional projection."""
        limit = query.limit or settings.default_page_size
        if limit > settings.max_page_size:
            raise InvalidInput(f"limit must be at most {settings.max_page_size}", field="limit")

        column = SORTABLE_FIELDS.get(query.sort_by)
        if column is None:
            raise InvalidInput(f"Cannot sort by '{query.sort_by}'", field="sortBy")
        paths = parse_fields(query.fields)

        criteria = []
        if query.city:
            criteria.append(_contains(Temple.location_city, query.city))
        if query.state:
            criteria.append(_contains(Temple.location_state, query.state))
        if query.is_verified is not None:
            criteria.append(Temple.is_verified.is_(query.is_verified))

        direction = asc if query.order == "asc" else desc
        total = await self.repo.count(*criteria)
        temples = await self.repo.find(
            *criteria,
            order_by=[direction(column), direction(Temple.id)],
            offset=(query.page - 1) * limit,
            limit=limit,
        )

        documents = [t.to_document() for t in temples]
        if paths:
            documents = [project(doc, paths) for doc in documents]

        return {
            "temples": documents,
            "pagination": {
                "total": total,
                "page": query.page,
                "limit": limit,
                "totalPages": math.ceil(total / limit),
                "hasNextPage": query.page * limit < total,
                "hasPrevPage": query.page > 1,
            },
        }

    async def get_temple_by_slug(self, slug: str) -> Temple:
        temple = await self.repo.find_one(Temple.slug == slug)
        if not temple:
            raise NotFound("Temple not found")
        return temple

    # --- Media ---

    async def replace_cover_image(
        self,
        caller: Caller,
        temple_id: Any,
        upload: Optional[MediaUpload],
    ) -> Temple:
        """
        Swap the cover image: upload the new one, commit it, then delete
        the old remote copy best-effort.
        """
        if upload is None:
            raise InvalidInput("Please upload a new cover image", field="coverImage")
        self.media.validate([upload])
        temple = await self._load_for_edit(caller, temple_id)

        new_cover = await self.media.upload_cover(upload)
        old_cover = (
            StoredAsset(temple.cover_image, temple.cover_image_public_id)
            if temple.cover_image
            else None
        )

        temple.cover_image = new_cover.url
        temple.cover_image_public_id = new_cover.public_id
        try:
            await self.repo.save(temple)
        except TempleError:
            await self.media.discard(new_cover)
            raise

        if old_cover is not None:
            await self.media.discard(old_cover)

        logger.info("Cover image replaced", extra={"temple_id": temple.id, "actor_id": caller.actor_id})
        await self._invalidate_public_cards()
        return temple

    async def add_gallery_images(
        self,
        caller: Caller,
        temple_id: Any,
        uploads: Sequence[MediaUpload],
    ) -> List[str]:
        """Upload a batch into the gallery; returns the URLs that made it."""
        if not uploads:
            raise InvalidInput("Please upload at least one gallery image", field="photoGallery")
        self.media.validate(uploads)
        temple = await self._load_for_edit(caller, temple_id)

        batch = await self.media.upload_batch(uploads)
        temple.photo_gallery = subcollections.extend(
            temple.photo_gallery, [asset.to_entry() for asset in batch.added]
        )
        try:
            await self.repo.save(temple)
        except TempleError:
            await self.media.discard_all(batch.added)
            raise

        logger.info(
            f"Added {len(batch.added)}/{len(uploads)} gallery images",
            extra={"temple_id": temple.id, "actor_id": caller.actor_id},
        )
        return batch.urls

    async def remove_gallery_image(self, caller: Caller, temple_id: Any, image_url: str) -> str:
        """Remove a gallery image by URL. The remote copy is deleted best-effort."""
        if not image_url:
            raise InvalidInput("Image URL is required", field="imageUrl")
        temple = await self._load_for_edit(caller, temple_id)

        gallery, index = subcollections.remove_by_value(
            temple.photo_gallery,
            image_url,
            key="url",
            not_found_message="Image not found in gallery",
        )
        entry = temple.photo_gallery[index]
        temple.photo_gallery = gallery
        await self.repo.save(temple)

        await self.media.discard(StoredAsset(entry["url"], entry.get("public_id")))
        logger.info("Gallery image removed", extra={"temple_id": temple.id, "actor_id": caller.actor_id})
        return image_url

    # --- Ceremonies and events ---

    async def add_ceremony(self, caller: Caller, temple_id: Any, ceremony: Any) -> List[Dict[str, Any]]:
        item = subcollections.validate_item(ceremony, CeremonyIn)
        temple = await self._load_for_edit(caller, temple_id)
        temple.special_ceremonies = subcollections.append(temple.special_ceremonies, item)
        await self.repo.save(temple)
        return list(temple.special_ceremonies)

    async def remove_ceremony(self, caller: Caller, temple_id: Any, index: int) -> Dict[str, Any]:
        return await self._remove_at(caller, temple_id, "special_ceremonies", index)

    async def add_event(self, caller: Caller, temple_id: Any, event: Any) -> List[Dict[str, Any]]:
        item = subcollections.validate_item(event, EventIn)
        temple = await self._load_for_edit(caller, temple_id)
        temple.upcoming_events = subcollections.append(temple.upcoming_events, item)
        await self.repo.save(temple)
        return list(temple.upcoming_events)

    async def remove_event(self, caller: Caller, temple_id: Any, index: int) -> Dict[str, Any]:
        return await self._remove_at(caller, temple_id, "upcoming_events", index)

    # --- Helpers ---

    async def _remove_at(self, caller: Caller, temple_id: Any, attr: str, index: int) -> Dict[str, Any]:
        if index < 0:
            raise InvalidInput(f"Index {index} is out of range.", field="index")
        temple = await self._load_for_edit(caller, temple_id)
        remaining, removed = subcollections.remove_at(getattr(temple, attr), index)
        setattr(temple, attr, remaining)
        await self.repo.save(temple)
        logger.info(
            f"Removed {attr} item at index {index}",
            extra={"temple_id": temple.id, "actor_id": caller.actor_id},
        )
        return removed

    async def _load(self, temple_id: Any) -> Temple:
        temple = await self.repo.find_by_id(parse_temple_id(temple_id))
        if not temple:
            raise NotFound("Temple not found")
        return temple

    async def _load_for_edit(self, caller: Caller, temple_id: Any) -> Temple:
        temple_uuid = parse_temple_id(temple_id)
        temple = await self._load(temple_uuid)
        self.workflow.ensure_can_edit(caller, temple)
        return temple

    async def _invalidate_public_cards(self) -> None:
        if settings.public_cards_cache_ttl > 0:
            await cache_delete(PUBLIC_CARDS_CACHE_KEY)
