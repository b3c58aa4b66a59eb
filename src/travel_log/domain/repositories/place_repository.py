"""Place repository interface."""

from abc import ABC, abstractmethod

from travel_log.domain.entities.place import Place
from travel_log.domain.value_objects.access_result import AccessResult
from travel_log.domain.value_objects.image_source import ImageSource


class PlaceRepository(ABC):
    """Repository interface for place persistence.

    Every operation reports failures through :class:`AccessResult`
    instead of raising.
    """

    @abstractmethod
    async def list_places(self) -> AccessResult[list[Place]]:
        """List all places, newest first."""
        pass

    @abstractmethod
    async def get_place(self, place_id: str) -> AccessResult[Place]:
        """Find a place by ID."""
        pass

    @abstractmethod
    async def add_place(self, draft: Place, image: ImageSource | None = None) -> AccessResult[str]:
        """Create a place owned by the current user and return its ID."""
        pass

    @abstractmethod
    async def update_place(self, place: Place, image: ImageSource | None = None) -> AccessResult[None]:
        """Overwrite a place owned by the current user."""
        pass

    @abstractmethod
    async def delete_place(self, place_id: str) -> AccessResult[None]:
        """Delete a place owned by the current user."""
        pass
