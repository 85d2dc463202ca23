"""
Temple API.
Registration, public listing and upkeep of temple records.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import ValidationError

from app.api.deps import get_caller, get_temple_service
from app.exceptions import InvalidInput
from app.schemas.caller import Caller
from app.schemas.temple import (
    CeremonyIn,
    EventIn,
    GalleryImageDelete,
    TempleCreate,
    TempleListQuery,
    TemplePatch,
)
from app.services.media_service import MediaUpload
from app.services.temple_service import TempleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/temples", tags=["Temples"])


def _validation_message(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def _to_upload(file: Optional[UploadFile]) -> Optional[MediaUpload]:
    if file is None or not file.filename:
        return None
    return MediaUpload(filename=file.filename, content=file.file)


def _to_uploads(files: Optional[List[UploadFile]]) -> List[MediaUpload]:
    uploads = [_to_upload(f) for f in files or []]
    return [u for u in uploads if u is not None]


def _success(service: TempleService, data, message: str) -> dict:
    body = {"status": "success", "message": message, "data": data}
    if service.warnings:
        body["warnings"] = service.warnings
    return body


@router.post("", status_code=201)
async def create_temple(
    payload: str = Form(..., description="Temple details as JSON"),
    cover_image: Optional[UploadFile] = File(None),
    photo_gallery: Optional[List[UploadFile]] = File(None),
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    """
    Register a temple.

    Multipart form: `payload` holds the JSON details, `cover_image` the
    mandatory cover and `photo_gallery` any number of gallery images.
    """
    try:
        details = TempleCreate.model_validate_json(payload)
    except ValidationError as e:
        raise InvalidInput(_validation_message(e))

    temple = await service.create_temple(
        caller,
        details,
        cover_image=_to_upload(cover_image),
        gallery=_to_uploads(photo_gallery),
    )
    return _success(service, temple.to_document(), "Temple Created Successfully !!")


@router.get("/mine")
async def get_my_temple(
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    """Temple registered by the calling admin."""
    temple = await service.get_temple_for_admin(caller)
    return _success(service, temple.to_document(), "Temple fetched successfully")


@router.get("/public")
async def get_public_temple_cards(
    service: TempleService = Depends(get_temple_service),
):
    """Card view of verified temples."""
    cards = await service.get_public_cards()
    return _success(service, cards, "Public temple cards fetched successfully")


@router.get("")
async def list_temples(
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    city: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    is_verified: Optional[bool] = Query(None, alias="isVerified"),
    sort_by: str = Query("createdAt", alias="sortBy"),
    order: str = Query("desc"),
    fields: Optional[str] = Query(None, description="Comma-separated fields to return"),
    service: TempleService = Depends(get_temple_service),
):
    """List temples with filters, sorting and pagination."""
    try:
        query = TempleListQuery(
            page=page,
            limit=limit,
            city=city,
            state=state,
            isVerified=is_verified,
            sortBy=sort_by,
            order=order,
            fields=fields,
        )
    except ValidationError as e:
        raise InvalidInput(_validation_message(e))

    result = await service.list_temples(query)
    return _success(service, result, "Temples fetched successfully")


@router.get("/slug/{slug}")
async def get_temple_by_slug(
    slug: str,
    service: TempleService = Depends(get_temple_service),
):
    temple = await service.get_temple_by_slug(slug)
    return _success(service, temple.to_document(), "Temple fetched successfully")


@router.patch("/{temple_id}")
async def update_temple_details(
    temple_id: str,
    patch: TemplePatch,
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    """Partially update temple details."""
    temple, changed = await service.update_temple(caller, temple_id, patch)
    return _success(
        service,
        {"updatedFields": changed, "temple": temple.to_document()},
        "Temple details updated successfully",
    )


@router.patch("/{temple_id}/cover-image")
async def update_temple_cover_image(
    temple_id: str,
    cover_image: Optional[UploadFile] = File(None),
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    temple = await service.replace_cover_image(caller, temple_id, _to_upload(cover_image))
    return _success(
        service,
        {"coverImage": temple.cover_image},
        "Temple cover image updated successfully",
    )


@router.post("/{temple_id}/gallery")
async def add_gallery_images(
    temple_id: str,
    photo_gallery: Optional[List[UploadFile]] = File(None),
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    added = await service.add_gallery_images(caller, temple_id, _to_uploads(photo_gallery))
    return _success(service, {"addedImages": added}, "Gallery images added successfully")


@router.delete("/{temple_id}/gallery")
async def delete_gallery_image(
    temple_id: str,
    request: GalleryImageDelete,
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    deleted = await service.remove_gallery_image(caller, temple_id, request.image_url)
    return _success(service, {"deletedImage": deleted}, "Gallery image deleted successfully")


@router.post("/{temple_id}/ceremonies")
async def add_special_ceremony(
    temple_id: str,
    ceremony: CeremonyIn,
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    ceremonies = await service.add_ceremony(caller, temple_id, ceremony)
    return _success(service, ceremonies, "Special Ceremony added successfully")


@router.delete("/{temple_id}/ceremonies/{index}")
async def delete_special_ceremony(
    temple_id: str,
    index: int,
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    deleted = await service.remove_ceremony(caller, temple_id, index)
    return _success(service, deleted, "Special ceremony deleted successfully")


@router.post("/{temple_id}/events", status_code=201)
async def add_upcoming_event(
    temple_id: str,
    event: EventIn,
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    events = await service.add_event(caller, temple_id, event)
    return _success(service, events, "Event added successfully")


@router.delete("/{temple_id}/events/{index}")
async def delete_upcoming_event(
    temple_id: str,
    index: int,
    caller: Caller = Depends(get_caller),
    service: TempleService = Depends(get_temple_service),
):
    deleted = await service.remove_event(caller, temple_id, index)
    return _success(service, deleted, "Event deleted successfully")
