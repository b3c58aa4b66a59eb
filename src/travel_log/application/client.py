"""Main client for the Travel Log system."""

from travel_log.application.view_models.auth import AuthViewModel
from travel_log.application.view_models.places import PlacesViewModel
from travel_log.infrastructure.backend.base import Backend
from travel_log.infrastructure.backend.factory import BackendFactory
from travel_log.infrastructure.repositories.auth_repository import IdentityAuthRepository
from travel_log.infrastructure.repositories.places_repository import PlacesRepository
from travel_log.shared.config.settings import Settings, get_settings


class TravelLogClient:
    """Wires one backend to the repositories and state holders.

    This is the primary entry point for front ends. Use it as an async
    context manager so network resources are released::

        async with TravelLogClient.from_settings() as client:
            await client.places.load_places()
    """

    def __init__(self, backend: Backend, settings: Settings):
        self.backend = backend
        self.settings = settings
        self.auth_repository = IdentityAuthRepository(backend.identity)
        self.places_repository = PlacesRepository(
            backend.documents,
            backend.blobs,
            backend.identity,
            collection=settings.backend.places_collection,
            image_prefix=settings.backend.image_prefix,
        )
        self.auth = AuthViewModel(self.auth_repository)
        self.places = PlacesViewModel(self.places_repository)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "TravelLogClient":
        """Create a client for the configured backend."""
        settings = settings or get_settings()
        return cls(BackendFactory.create(settings), settings)

    async def close(self) -> None:
        await self.backend.close()

    async def __aenter__(self) -> "TravelLogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
