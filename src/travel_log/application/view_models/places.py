"""State holder for the place list, detail and edit screens."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from travel_log.application.view_models.base import ViewModel
from travel_log.domain.entities.place import Place
from travel_log.domain.repositories.place_repository import PlaceRepository
from travel_log.domain.value_objects.image_source import ImageSource

logger = logging.getLogger("travel_log.view_models.places")

MIN_RATING = 0.0
MAX_RATING = 5.0


class PlacesStatus(Enum):
    """State of the place list."""
    LOADING = "loading"
    EMPTY = "empty"
    SUCCESS = "success"
    ERROR = "error"


class PlaceDetailsStatus(Enum):
    """State of a single place being viewed."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class PlaceOperationStatus(Enum):
    """State of an add, update or delete."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    DELETED = "deleted"
    ERROR = "error"


@dataclass(frozen=True)
class PlacesState:
    status: PlacesStatus
    places: list[Place] = field(default_factory=list)
    message: str = ""

    @classmethod
    def loading(cls) -> "PlacesState":
        return cls(PlacesStatus.LOADING)

    @classmethod
    def empty(cls) -> "PlacesState":
        return cls(PlacesStatus.EMPTY)

    @classmethod
    def success(cls, places: list[Place]) -> "PlacesState":
        return cls(PlacesStatus.SUCCESS, places=list(places))

    @classmethod
    def error(cls, message: str) -> "PlacesState":
        return cls(PlacesStatus.ERROR, message=message)


@dataclass(frozen=True)
class PlaceDetailsState:
    status: PlaceDetailsStatus
    place: Place | None = None
    message: str = ""


@dataclass(frozen=True)
class PlaceOperationState:
    status: PlaceOperationStatus
    place_id: str = ""
    message: str = ""

    @property
    def is_finished(self) -> bool:
        """Check if the operation completed, successfully or not."""
        return self.status in (
            PlaceOperationStatus.SUCCESS,
            PlaceOperationStatus.DELETED,
            PlaceOperationStatus.ERROR,
        )


def validate_place(place: Place) -> str | None:
    """Return a message describing invalid input, or ``None``."""
    if not place.name.strip():
        return "Name must not be empty"
    if not place.description.strip():
        return "Description must not be empty"
    if not MIN_RATING <= place.rating <= MAX_RATING:
        return f"Rating must be between {MIN_RATING:g} and {MAX_RATING:g}"
    return None


class PlacesViewModel(ViewModel):
    """Maps place repository results to observable screen state."""

    def __init__(self, repository: PlaceRepository):
        super().__init__()
        self.repository = repository
        self.places_state = PlacesState.loading()
        self.place_details_state = PlaceDetailsState(PlaceDetailsStatus.IDLE)
        self.place_operation_state = PlaceOperationState(PlaceOperationStatus.IDLE)

    async def load_places(self) -> PlacesState:
        """Load every place."""
        self._set_state("places_state", PlacesState.loading())

        result = await self.repository.list_places()
        if result.success:
            places = result.value or []
            state = PlacesState.success(places) if places else PlacesState.empty()
        else:
            state = PlacesState.error(result.message or "Failed to load places")

        self._set_state("places_state", state)
        return state

    async def load_place(self, place_id: str) -> PlaceDetailsState:
        """Load one place for display or editing."""
        self._set_state("place_details_state", PlaceDetailsState(PlaceDetailsStatus.LOADING))

        result = await self.repository.get_place(place_id)
        if result.success:
            state = PlaceDetailsState(PlaceDetailsStatus.SUCCESS, place=result.value)
        else:
            state = PlaceDetailsState(
                PlaceDetailsStatus.ERROR, message=result.message or "Failed to load place"
            )

        self._set_state("place_details_state", state)
        return state

    async def add_place(self, place: Place, image: ImageSource | None = None) -> PlaceOperationState:
        """Validate and create a place."""
        logger.debug(f"add_place called with place: {place.name}, image: {image.locator if image else None}")
        invalid = validate_place(place)
        if invalid:
            return self._operation(PlaceOperationState(PlaceOperationStatus.ERROR, message=invalid))

        self._operation(PlaceOperationState(PlaceOperationStatus.LOADING))
        result = await self.repository.add_place(place, image)
        if result.success:
            return self._operation(PlaceOperationState(PlaceOperationStatus.SUCCESS, place_id=result.value))
        return self._operation(PlaceOperationState(
            PlaceOperationStatus.ERROR, message=result.message or "Failed to add place"
        ))

    async def update_place(self, place: Place, image: ImageSource | None = None) -> PlaceOperationState:
        """Validate and overwrite a place."""
        invalid = validate_place(place)
        if invalid:
            return self._operation(PlaceOperationState(PlaceOperationStatus.ERROR, message=invalid))

        self._operation(PlaceOperationState(PlaceOperationStatus.LOADING))
        result = await self.repository.update_place(place, image)
        if result.success:
            return self._operation(PlaceOperationState(PlaceOperationStatus.SUCCESS, place_id=place.id))
        return self._operation(PlaceOperationState(
            PlaceOperationStatus.ERROR, message=result.message or "Failed to update place"
        ))

    async def delete_place(self, place_id: str) -> PlaceOperationState:
        """Delete a place."""
        self._operation(PlaceOperationState(PlaceOperationStatus.LOADING))
        result = await self.repository.delete_place(place_id)
        if result.success:
            return self._operation(PlaceOperationState(PlaceOperationStatus.DELETED, place_id=place_id))
        return self._operation(PlaceOperationState(
            PlaceOperationStatus.ERROR, message=result.message or "Failed to delete place"
        ))

    def reset_operation_state(self) -> None:
        self._operation(PlaceOperationState(PlaceOperationStatus.IDLE))

    def _operation(self, state: PlaceOperationState) -> PlaceOperationState:
        self._set_state("place_operation_state", state)
        return state
