"""Tests for place document mapping."""

from datetime import datetime, timezone

import pytest

from travel_log.domain.entities.place import Place
from travel_log.infrastructure.backend.base import StoredDocument
from travel_log.infrastructure.repositories.place_mapper import (
    MalformedRecordError,
    place_from_document,
    place_to_fields,
)

CREATED = datetime(2024, 3, 9, 18, 30, tzinfo=timezone.utc)


def test_fields_use_stored_names():
    place = Place(
        id="p1",
        name="Eiffel Tower",
        description="Iconic",
        image_url="https://example.com/e.jpg",
        rating=4,
        created_at=CREATED,
        owner_id="u1",
    )

    assert place_to_fields(place) == {
        "name": "Eiffel Tower",
        "description": "Iconic",
        "imageUrl": "https://example.com/e.jpg",
        "rating": 4.0,
        "createdAt": CREATED,
        "userId": "u1",
    }


def test_decode_takes_id_from_document():
    fields = {"name": "Louvre", "rating": 5, "createdAt": CREATED, "userId": "u2"}

    place = place_from_document(StoredDocument(id="abc", fields=fields))

    assert place.id == "abc"
    assert place.rating == 5.0
    assert isinstance(place.rating, float)
    assert place.owner_id == "u2"
    assert place.description == ""


def test_null_fields_fall_back_to_defaults():
    fields = {"name": None, "rating": None, "createdAt": None, "imageUrl": None}

    place = place_from_document(StoredDocument(id="x", fields=fields))

    assert place == Place(id="x")


@pytest.mark.parametrize("fields", [
    {"rating": "4.5"},
    {"rating": True},
    {"name": ["not", "text"]},
    {"createdAt": "2024-03-09"},
    {"userId": 7},
])
def test_wrongly_typed_fields_are_malformed(fields):
    with pytest.raises(MalformedRecordError):
        place_from_document(StoredDocument(id="bad", fields=fields))
