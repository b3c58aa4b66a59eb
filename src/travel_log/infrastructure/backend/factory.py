"""Backend factory."""

from collections.abc import Callable

from travel_log.infrastructure.backend.base import Backend, BackendProvider
from travel_log.infrastructure.backend.memory import (
    InMemoryBlobStore,
    InMemoryDocumentStore,
    InMemoryIdentityProvider,
)
from travel_log.infrastructure.firebase.auth import FirebaseAuth
from travel_log.infrastructure.firebase.firestore import FirestoreDocumentStore
from travel_log.infrastructure.firebase.http import FirebaseConfig, create_http_client
from travel_log.infrastructure.firebase.storage import FirebaseStorage
from travel_log.shared.config.settings import Settings


def _create_firebase(settings: Settings) -> Backend:
    config = FirebaseConfig(**settings.get_firebase_config())
    # One connection pool for all three clients.
    client = create_http_client(config)
    identity = FirebaseAuth(config, http_client=client, session_file=settings.session_path)
    return _FirebaseBackend(
        provider=BackendProvider.FIREBASE,
        identity=identity,
        documents=FirestoreDocumentStore(config, token_source=identity.get_id_token, http_client=client),
        blobs=FirebaseStorage(config, token_source=identity.get_id_token, http_client=client),
        http_client=client,
    )


def _create_memory(settings: Settings) -> Backend:
    return Backend(
        provider=BackendProvider.MEMORY,
        identity=InMemoryIdentityProvider(),
        documents=InMemoryDocumentStore(),
        blobs=InMemoryBlobStore(),
    )


class _FirebaseBackend(Backend):
    """Firebase clients sharing one HTTP client."""

    def __init__(self, *, http_client, **kwargs):
        super().__init__(**kwargs)
        self._http_client = http_client

    async def close(self) -> None:
        await self._http_client.aclose()


class BackendFactory:
    """Factory for creating backend client sets.

    This factory provides a centralized way to create the identity,
    document and blob clients based on configuration.
    """

    _providers: dict[BackendProvider, Callable[[Settings], Backend]] = {
        BackendProvider.FIREBASE: _create_firebase,
        BackendProvider.MEMORY: _create_memory,
    }

    @classmethod
    def create(cls, settings: Settings) -> Backend:
        """Create a backend from settings.

        Args:
            settings: Application settings

        Returns:
            Backend with matching identity, document and blob clients

        Raises:
            ValueError: If the provider is not supported or misconfigured
        """
        try:
            provider = BackendProvider(settings.backend.provider.lower())
        except ValueError:
            provider = None
        builder = cls._providers.get(provider) if provider else None
        if not builder:
            raise ValueError(
                f"Unsupported backend provider: {settings.backend.provider}. "
                f"Supported providers: {cls.get_supported_providers()}"
            )
        return builder(settings)

    @classmethod
    def register_provider(
        cls,
        provider: BackendProvider,
        builder: Callable[[Settings], Backend]
    ) -> None:
        """Register a builder for a provider.

        Args:
            provider: Provider enum value
            builder: Callable building a Backend from settings
        """
        cls._providers[provider] = builder

    @classmethod
    def get_supported_providers(cls) -> list[str]:
        """Get list of supported provider names."""
        return [p.value for p in cls._providers.keys()]
