"""Place entity representing a travel destination."""

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass
class Place:
    """A travel destination recorded by a user.

    The ``id`` is assigned by the document store on first write and is
    empty until then. ``owner_id`` is only ever set by the places
    repository from the authenticated session.
    """

    id: str = ""
    name: str = ""
    description: str = ""
    image_url: str = ""
    rating: float = 0.0
    created_at: datetime | None = None
    owner_id: str = ""

    def copy(self, **changes) -> "Place":
        """Return a copy of the place with the given fields replaced."""
        return replace(self, **changes)

    @property
    def has_image(self) -> bool:
        """Check if a photo is attached."""
        return bool(self.image_url)

    @property
    def is_persisted(self) -> bool:
        """Check if the place has been written to the store."""
        return bool(self.id)

    def is_owned_by(self, user_id: str | None) -> bool:
        """Check if the given user created this place."""
        return user_id is not None and self.owner_id == user_id

    def __str__(self) -> str:
        """String representation of the place."""
        return f"Place({self.id or '<new>'}, {self.name!r}, rating={self.rating})"
