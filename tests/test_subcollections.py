"""
Tests for indexed sub-collection operations.
"""

import pytest

from app.exceptions import InvalidInput, NotFound
from app.schemas.temple import CeremonyIn, EventIn
from app.services import subcollections


CEREMONIES = [
    {"name": "Maha Shivaratri", "dateTime": "2027-03-06T18:00:00"},
    {"name": "Karthika Deepam", "dateTime": "2026-11-24T18:30:00"},
    {"name": "Shravan Somvar", "dateTime": "2027-07-26T06:00:00"},
]


@pytest.mark.parametrize("index", [-1, 3, 10])
def test_remove_at_rejects_out_of_range(index):
    original = list(CEREMONIES)

    with pytest.raises(InvalidInput) as exc:
        subcollections.remove_at(original, index)

    assert exc.value.field == "index"
    assert original == CEREMONIES


def test_remove_at_middle_keeps_order():
    remaining, removed = subcollections.remove_at(CEREMONIES, 1)

    assert remaining == [CEREMONIES[0], CEREMONIES[2]]
    assert removed == CEREMONIES[1]
    assert len(CEREMONIES) == 3


def test_append_then_remove_last_round_trip():
    item = {"name": "Ugadi", "dateTime": "2027-03-29T07:00:00"}

    appended = subcollections.append([], item, CeremonyIn)
    remaining, removed = subcollections.remove_at(appended, len(appended) - 1)

    assert remaining == []
    assert removed == appended[0]
    assert removed["name"] == "Ugadi"


def test_append_validates_timestamp():
    with pytest.raises(InvalidInput):
        subcollections.append([], {"name": "Ugadi", "dateTime": "not a date"}, CeremonyIn)


def test_append_requires_title_for_events():
    with pytest.raises(InvalidInput):
        subcollections.append([], {"eventDate": "2027-01-10"}, EventIn)


def test_append_does_not_mutate_input():
    original = list(CEREMONIES)
    result = subcollections.append(original, {"name": "Diwali", "dateTime": "2026-11-08T19:00:00"}, CeremonyIn)

    assert original == CEREMONIES
    assert len(result) == 4
    assert result[-1]["dateTime"] == "2026-11-08T19:00:00"


def test_remove_by_value_with_key():
    gallery = [
        {"url": "https://img/a.jpg", "public_id": "a"},
        {"url": "https://img/b.jpg", "public_id": "b"},
        {"url": "https://img/b.jpg", "public_id": "b2"},
    ]

    remaining, index = subcollections.remove_by_value(gallery, "https://img/b.jpg", key="url")

    assert index == 1
    assert remaining == [gallery[0], gallery[2]]


def test_remove_by_value_missing_raises_not_found():
    with pytest.raises(NotFound) as exc:
        subcollections.remove_by_value(["a", "b"], "c", not_found_message="Image not found in gallery")

    assert exc.value.message == "Image not found in gallery"
