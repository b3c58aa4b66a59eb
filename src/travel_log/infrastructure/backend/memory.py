"""In-process backend used by tests and the ``memory`` provider."""

import copy
import hashlib
import itertools
import secrets
import string
from typing import Any, BinaryIO
from urllib.parse import parse_qs, quote, unquote, urlparse

from travel_log.domain.entities.session import AuthSession
from travel_log.infrastructure.backend.base import (
    BlobStore,
    DocumentStore,
    IdentityProvider,
    SortDirection,
    StoredBlob,
    StoredDocument,
)
from travel_log.infrastructure.backend.errors import (
    AuthenticationError,
    NotFoundError,
    PreconditionFailedError,
)

_ID_ALPHABET = string.ascii_letters + string.digits


def _auto_id(length: int = 20) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


class InMemoryIdentityProvider(IdentityProvider):
    """Accounts kept in a dictionary.

    Passwords are stored as salted SHA-256 digests. Sessions never
    expire.
    """

    def __init__(self, session: AuthSession | None = None):
        self._accounts: dict[str, tuple[str, str, str]] = {}
        self._session = session

    @property
    def session(self) -> AuthSession | None:
        return self._session

    def use_session(self, user_id: str | None, email: str = "") -> None:
        """Switch to a session for ``user_id`` without a password."""
        self._session = AuthSession(user_id=user_id, email=email) if user_id else None

    @staticmethod
    def _digest(salt: str, password: str) -> str:
        return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()

    async def sign_up(self, email: str, password: str) -> AuthSession:
        key = email.strip().lower()
        if key in self._accounts:
            raise AuthenticationError("The email address is already in use", code="EMAIL_EXISTS")
        if len(password) < 6:
            raise AuthenticationError(
                "Password should be at least 6 characters", code="WEAK_PASSWORD"
            )
        salt = secrets.token_hex(8)
        user_id = _auto_id(28)
        self._accounts[key] = (user_id, salt, self._digest(salt, password))
        self._session = self._new_session(user_id, email)
        return self._session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        account = self._accounts.get(email.strip().lower())
        if account is None:
            raise AuthenticationError("No account for this email", code="EMAIL_NOT_FOUND")
        user_id, salt, digest = account
        if self._digest(salt, password) != digest:
            raise AuthenticationError("The password is invalid", code="INVALID_PASSWORD")
        self._session = self._new_session(user_id, email)
        return self._session

    def sign_out(self) -> None:
        self._session = None

    @staticmethod
    def _new_session(user_id: str, email: str) -> AuthSession:
        return AuthSession(
            user_id=user_id,
            email=email,
            id_token=secrets.token_urlsafe(24),
            refresh_token=secrets.token_urlsafe(24),
        )


class InMemoryDocumentStore(DocumentStore):
    """Documents kept in nested dictionaries.

    Stored fields are deep-copied on the way in and out so callers can
    never mutate stored state. ``write_count`` counts successful
    create/overwrite/delete calls.
    """

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, StoredDocument]] = {}
        self._versions = itertools.count(1)
        self.write_count = 0

    def _collection(self, name: str) -> dict[str, StoredDocument]:
        return self._collections.setdefault(name, {})

    def _snapshot(self, document: StoredDocument) -> StoredDocument:
        return StoredDocument(
            id=document.id,
            fields=copy.deepcopy(document.fields),
            version=document.version,
        )

    def _next_version(self) -> str:
        return str(next(self._versions))

    def _check_version(self, collection: str, document_id: str, if_version: str | None) -> StoredDocument:
        existing = self._collection(collection).get(document_id)
        if existing is None:
            if if_version is not None:
                raise PreconditionFailedError(
                    f"Document {collection}/{document_id} no longer exists", code="FAILED_PRECONDITION"
                )
            raise NotFoundError(f"No document to update: {collection}/{document_id}", code="NOT_FOUND")
        if if_version is not None and existing.version != if_version:
            raise PreconditionFailedError(
                f"Document {collection}/{document_id} was modified concurrently",
                code="FAILED_PRECONDITION",
            )
        return existing

    async def create(self, collection: str, fields: dict[str, Any]) -> StoredDocument:
        document = StoredDocument(
            id=_auto_id(),
            fields=copy.deepcopy(fields),
            version=self._next_version(),
        )
        self._collection(collection)[document.id] = document
        self.write_count += 1
        return self._snapshot(document)

    async def get(self, collection: str, document_id: str) -> StoredDocument:
        document = self._collection(collection).get(document_id)
        if document is None:
            raise NotFoundError(f"Document not found: {collection}/{document_id}", code="NOT_FOUND")
        return self._snapshot(document)

    async def overwrite(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        if_version: str | None = None,
    ) -> StoredDocument:
        existing = self._check_version(collection, document_id, if_version)
        existing.fields = copy.deepcopy(fields)
        existing.version = self._next_version()
        self.write_count += 1
        return self._snapshot(existing)

    async def delete(self, collection: str, document_id: str, *, if_version: str | None = None) -> None:
        if if_version is not None:
            self._check_version(collection, document_id, if_version)
        if self._collection(collection).pop(document_id, None) is not None:
            self.write_count += 1

    async def query(
        self,
        collection: str,
        order_by: str | None = None,
        direction: SortDirection = SortDirection.ASCENDING,
    ) -> list[StoredDocument]:
        documents = list(self._collection(collection).values())
        if order_by is not None:
            documents = [d for d in documents if d.fields.get(order_by) is not None]
            documents.sort(
                key=lambda d: d.fields[order_by],
                reverse=direction == SortDirection.DESCENDING,
            )
        return [self._snapshot(d) for d in documents]

    def put(self, collection: str, document_id: str, fields: dict[str, Any]) -> StoredDocument:
        """Seed a document under a fixed ID, bypassing write accounting."""
        document = StoredDocument(
            id=document_id,
            fields=copy.deepcopy(fields),
            version=self._next_version(),
        )
        self._collection(collection)[document_id] = document
        return self._snapshot(document)

    def documents(self, collection: str) -> dict[str, dict[str, Any]]:
        """Current fields of every document in a collection."""
        return {
            document_id: copy.deepcopy(document.fields)
            for document_id, document in self._collection(collection).items()
        }


class InMemoryBlobStore(BlobStore):
    """Objects kept in a dictionary, addressed by ``memory://`` URLs."""

    def __init__(self, bucket: str = "local"):
        self.bucket = bucket
        self._objects: dict[str, tuple[bytes, str | None, str]] = {}

    async def upload(
        self,
        reference: str,
        data: bytes | BinaryIO,
        content_type: str | None = None,
    ) -> StoredBlob:
        payload = data if isinstance(data, (bytes, bytearray)) else data.read()
        token = secrets.token_hex(16)
        self._objects[reference] = (bytes(payload), content_type, token)
        return StoredBlob(
            reference=reference,
            download_url=self._download_url(reference, token),
            content_type=content_type,
            size=len(payload),
        )

    async def delete(self, reference: str) -> None:
        if self._objects.pop(reference, None) is None:
            raise NotFoundError(f"Object does not exist: {reference}", code="NOT_FOUND")

    def reference_from_url(self, url: str) -> str:
        parsed = urlparse(url)
        if parsed.scheme != "memory" or parsed.netloc != self.bucket:
            raise ValueError(f"Not a download URL for bucket {self.bucket!r}: {url}")
        return unquote(parsed.path.lstrip("/"))

    def _download_url(self, reference: str, token: str) -> str:
        return f"memory://{self.bucket}/{quote(reference, safe='')}?token={token}"

    def exists(self, reference: str) -> bool:
        return reference in self._objects

    def read(self, url: str) -> bytes:
        """Return the payload behind a download URL."""
        reference = self.reference_from_url(url)
        payload, _, token = self._objects[reference]
        if parse_qs(urlparse(url).query).get("token") != [token]:
            raise NotFoundError(f"Stale download URL: {url}", code="NOT_FOUND")
        return payload

    @property
    def references(self) -> list[str]:
        return sorted(self._objects)

