"""Mapping between place documents and :class:`Place` entities."""

from datetime import datetime
from typing import Any

from travel_log.domain.entities.place import Place
from travel_log.infrastructure.backend.base import StoredDocument

# Document field names, shared with the mobile app.
NAME = "name"
DESCRIPTION = "description"
IMAGE_URL = "imageUrl"
RATING = "rating"
CREATED_AT = "createdAt"
OWNER_ID = "userId"


class MalformedRecordError(ValueError):
    """A stored document cannot be decoded into a place."""


def place_to_fields(place: Place) -> dict[str, Any]:
    """Document fields for a place. The ID is not part of the fields."""
    return {
        NAME: place.name,
        DESCRIPTION: place.description,
        IMAGE_URL: place.image_url,
        RATING: float(place.rating),
        CREATED_AT: place.created_at,
        OWNER_ID: place.owner_id,
    }


def _text(fields: dict[str, Any], key: str) -> str:
    value = fields.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedRecordError(f"Field {key!r} must be a string, got {type(value).__name__}")
    return value


def place_from_document(document: StoredDocument) -> Place:
    """Decode a stored document.

    Missing or null fields fall back to the entity defaults.

    Raises:
        MalformedRecordError: If a present field has the wrong type
    """
    fields = document.fields

    rating = fields.get(RATING)
    if rating is None:
        rating = 0.0
    elif isinstance(rating, bool) or not isinstance(rating, (int, float)):
        raise MalformedRecordError(f"Field {RATING!r} must be a number, got {type(rating).__name__}")

    created_at = fields.get(CREATED_AT)
    if created_at is not None and not isinstance(created_at, datetime):
        raise MalformedRecordError(
            f"Field {CREATED_AT!r} must be a timestamp, got {type(created_at).__name__}"
        )

    return Place(
        id=document.id,
        name=_text(fields, NAME),
        description=_text(fields, DESCRIPTION),
        image_url=_text(fields, IMAGE_URL),
        rating=float(rating),
        created_at=created_at,
        owner_id=_text(fields, OWNER_ID),
    )
