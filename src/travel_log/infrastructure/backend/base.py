"""Backend service interfaces and common types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO

from travel_log.domain.entities.session import AuthSession


class BackendProvider(Enum):
    """Supported backend providers."""
    FIREBASE = "firebase"
    MEMORY = "memory"


class SortDirection(Enum):
    """Query ordering direction."""
    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"


@dataclass
class StoredDocument:
    """A document as read from or written to the document store.

    ``version`` is an opaque token that changes on every write. It can
    be passed back as a write precondition.
    """
    id: str
    fields: dict[str, Any] = field(default_factory=dict)
    version: str | None = None


@dataclass
class StoredBlob:
    """An object held by the blob store."""
    reference: str
    download_url: str
    content_type: str | None = None
    size: int = 0


class SessionProvider(ABC):
    """Source of the currently authenticated user."""

    @abstractmethod
    def current_user_id(self) -> str | None:
        """Return the signed-in user ID, or ``None``."""
        pass


class IdentityProvider(SessionProvider):
    """Account management on top of a session provider.

    All methods raise :class:`AuthenticationError` on failure.
    """

    @property
    @abstractmethod
    def session(self) -> AuthSession | None:
        """The current session, if any."""
        pass

    def current_user_id(self) -> str | None:
        return self.session.user_id if self.session else None

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthSession:
        """Create an account and start a session for it."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Start a session for an existing account."""
        pass

    @abstractmethod
    def sign_out(self) -> None:
        """End the current session."""
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass


class DocumentStore(ABC):
    """Collection-scoped document database.

    Field values are JSON-like (``str``, ``int``, ``float``, ``bool``,
    ``None``, lists, dicts) plus timezone-aware ``datetime``.
    """

    @abstractmethod
    async def create(self, collection: str, fields: dict[str, Any]) -> StoredDocument:
        """Create a document with a store-assigned ID.

        Args:
            collection: Collection name
            fields: Document fields

        Returns:
            The stored document including its new ID
        """
        pass

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> StoredDocument:
        """Read a document.

        Raises:
            NotFoundError: If no document exists at the ID
        """
        pass

    @abstractmethod
    async def overwrite(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        if_version: str | None = None,
    ) -> StoredDocument:
        """Replace every field of an existing document.

        Args:
            collection: Collection name
            document_id: ID of the document to replace
            fields: New document fields
            if_version: Only write if the stored version still matches

        Raises:
            NotFoundError: If the document does not exist
            PreconditionFailedError: If ``if_version`` no longer matches
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, document_id: str, *, if_version: str | None = None) -> None:
        """Delete a document.

        Raises:
            PreconditionFailedError: If ``if_version`` no longer matches
        """
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        order_by: str | None = None,
        direction: SortDirection = SortDirection.ASCENDING,
    ) -> list[StoredDocument]:
        """Read every document of a collection, optionally ordered.

        Documents lacking the ``order_by`` field are left out.
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        pass


class BlobStore(ABC):
    """Reference-addressable binary object storage."""

    @abstractmethod
    async def upload(
        self,
        reference: str,
        data: bytes | BinaryIO,
        content_type: str | None = None,
    ) -> StoredBlob:
        """Store an object, replacing any object at the same reference.

        Returns:
            The stored blob with its stable download URL
        """
        pass

    @abstractmethod
    async def delete(self, reference: str) -> None:
        """Delete an object.

        Raises:
            NotFoundError: If no object exists at the reference
        """
        pass

    @abstractmethod
    def reference_from_url(self, url: str) -> str:
        """Resolve the object reference behind a download URL.

        Raises:
            ValueError: If the URL does not point into this store
        """
        pass

    async def delete_by_url(self, url: str) -> None:
        """Delete the object a download URL points to."""
        await self.delete(self.reference_from_url(url))

    async def close(self) -> None:
        """Release network resources."""
        pass


@dataclass
class Backend:
    """A matching set of backend clients."""
    provider: BackendProvider
    identity: IdentityProvider
    documents: DocumentStore
    blobs: BlobStore

    async def close(self) -> None:
        """Close every client."""
        await self.identity.close()
        await self.documents.close()
        await self.blobs.close()
