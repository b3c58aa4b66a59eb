"""Backend service interfaces.

``BackendFactory`` is not re-exported here: the provider packages import
this package, and the factory imports them.
"""

from travel_log.infrastructure.backend.base import (
    Backend,
    BackendProvider,
    BlobStore,
    DocumentStore,
    IdentityProvider,
    SessionProvider,
    SortDirection,
    StoredBlob,
    StoredDocument,
)

__all__ = [
    "Backend",
    "BackendProvider",
    "BlobStore",
    "DocumentStore",
    "IdentityProvider",
    "SessionProvider",
    "SortDirection",
    "StoredBlob",
    "StoredDocument",
]
