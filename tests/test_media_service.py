"""
Tests for the media lifecycle coordinator.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from app.exceptions import InvalidInput, UpstreamFailure
from app.services.media_service import (
    CloudinaryMediaStore,
    MediaLifecycle,
    MediaStoreError,
    StoredAsset,
    public_id_from_url,
)
from tests.conftest import FakeMediaStore, image


def test_public_id_from_url():
    url = "https://res.cloudinary.com/demo/image/upload/v1712/temples/abc123.jpg?x=1"
    assert public_id_from_url(url) == "abc123"
    assert public_id_from_url("") is None


def test_validate_rejects_non_images():
    with pytest.raises(InvalidInput):
        MediaLifecycle.validate([image("cover.jpg"), image("notes.pdf")])


@pytest.mark.asyncio
async def test_upload_cover_failure_is_fatal():
    store = FakeMediaStore(fail_uploads={"cover.jpg"})
    media = MediaLifecycle(store)

    with pytest.raises(UpstreamFailure):
        await media.upload_cover(image("cover.jpg"))


@pytest.mark.asyncio
async def test_upload_cover_missing():
    media = MediaLifecycle(FakeMediaStore())

    with pytest.raises(InvalidInput):
        await media.upload_cover(None)


@pytest.mark.asyncio
async def test_batch_partial_failure_keeps_successes_in_order():
    names = [f"g{i}.jpg" for i in range(5)]
    store = FakeMediaStore(fail_uploads={"g1.jpg", "g3.jpg"})
    media = MediaLifecycle(store)

    batch = await media.upload_batch([image(n) for n in names])

    assert [a.public_id for a in batch.added] == [
        "devalaya/temples/g0",
        "devalaya/temples/g2",
        "devalaya/temples/g4",
    ]
    assert batch.failed == ["g1.jpg", "g3.jpg"]
    assert len(media.warnings) == 1
    assert "2 of 5" in media.warnings[0]


@pytest.mark.asyncio
async def test_batch_all_failed():
    store = FakeMediaStore(fail_uploads={"a.jpg", "b.jpg"})
    media = MediaLifecycle(store)

    with pytest.raises(UpstreamFailure):
        await media.upload_batch([image("a.jpg"), image("b.jpg")])

    tolerant = await MediaLifecycle(store).upload_batch(
        [image("a.jpg"), image("b.jpg")], require_any=False
    )
    assert tolerant.added == []


@pytest.mark.asyncio
async def test_discard_prefers_stored_public_id():
    store = FakeMediaStore()
    media = MediaLifecycle(store)

    await media.discard(StoredAsset("https://img/x/other.jpg", "devalaya/temples/real"))

    assert store.deleted == ["devalaya/temples/real"]
    assert media.warnings == []


@pytest.mark.asyncio
async def test_discard_falls_back_to_url():
    store = FakeMediaStore()
    media = MediaLifecycle(store)

    await media.discard(StoredAsset("https://res.cloudinary.com/demo/image/upload/v1/legacy.png"))

    assert store.deleted == ["legacy"]


@pytest.mark.asyncio
async def test_discard_failure_becomes_warning():
    store = FakeMediaStore(fail_deletes=True)
    media = MediaLifecycle(store)

    await media.discard(StoredAsset("https://img/a.jpg", "a"))

    assert len(media.warnings) == 1
    assert "a" in media.warnings[0]


@pytest.mark.asyncio
async def test_discard_uses_cleanup_handler():
    store = FakeMediaStore()
    cleanup = AsyncMock()
    media = MediaLifecycle(store, cleanup=cleanup)

    await media.discard(StoredAsset("https://img/a.jpg", "a"))

    cleanup.assert_awaited_once_with("a", "image")
    assert store.deleted == []


@pytest.mark.asyncio
async def test_discard_falls_back_inline_when_handoff_fails():
    store = FakeMediaStore()
    cleanup = AsyncMock(side_effect=ConnectionError("broker down"))
    media = MediaLifecycle(store, cleanup=cleanup)

    await media.discard(StoredAsset("https://img/a.jpg", "a"))

    assert store.deleted == ["a"]
    assert media.warnings == []


def test_cloudinary_store_upload_and_destroy():
    store = CloudinaryMediaStore(folder="tests")
    with patch("cloudinary.uploader.upload") as upload, patch("cloudinary.uploader.destroy") as destroy:
        upload.return_value = {"secure_url": "https://res.cloudinary.com/x.jpg", "public_id": "tests/x"}
        destroy.return_value = {"result": "not found"}

        asset = store.upload_sync(image("x.jpg"))
        store.delete_sync("tests/x")

    assert asset == StoredAsset("https://res.cloudinary.com/x.jpg", "tests/x")
    upload.assert_called_once()
    assert upload.call_args.kwargs["folder"] == "tests"
    destroy.assert_called_once_with("tests/x", resource_type="image")


def test_cloudinary_store_destroy_error():
    store = CloudinaryMediaStore(folder="tests")
    with patch("cloudinary.uploader.destroy", MagicMock(return_value={"result": "error"})):
        with pytest.raises(MediaStoreError):
            store.delete_sync("tests/x")
