"""Place repository backed by a document store and a blob store."""

import hashlib
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from travel_log.domain.entities.place import Place
from travel_log.domain.repositories.place_repository import PlaceRepository
from travel_log.domain.value_objects.access_result import AccessErrorKind, AccessResult
from travel_log.domain.value_objects.image_source import ImageSource
from travel_log.infrastructure.backend.base import (
    BlobStore,
    DocumentStore,
    SessionProvider,
    SortDirection,
)
from travel_log.infrastructure.backend.errors import (
    AuthenticationError,
    BackendError,
    MalformedDocumentError,
    NotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
)
from travel_log.infrastructure.repositories.place_mapper import (
    CREATED_AT,
    MalformedRecordError,
    place_from_document,
    place_to_fields,
)

logger = logging.getLogger("travel_log.places")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PlacesRepository(PlaceRepository):
    """Places stored as documents, photos stored as blobs.

    Writes are only allowed for the user in ``session``. ``update_place``
    and ``delete_place`` re-read the stored owner before writing and
    make the write conditional on the version they read, so a document
    changed in between is reported as ``CONFLICT`` instead of being
    silently overwritten.
    """

    def __init__(
        self,
        documents: DocumentStore,
        blobs: BlobStore,
        session: SessionProvider,
        collection: str = "places",
        image_prefix: str = "place_images",
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.documents = documents
        self.blobs = blobs
        self.session = session
        self.collection = collection
        self.image_prefix = image_prefix.strip("/")
        self._clock = clock

    async def list_places(self) -> AccessResult[list[Place]]:
        try:
            documents = await self.documents.query(
                self.collection, order_by=CREATED_AT, direction=SortDirection.DESCENDING
            )
        except BackendError as e:
            return self._failure(e)

        places = []
        for document in documents:
            try:
                places.append(place_from_document(document))
            except MalformedRecordError as e:
                logger.warning(f"[Places] Document {document.id} is malformed: {e}")
                return AccessResult.fail(
                    AccessErrorKind.MALFORMED_RECORD,
                    f"Unable to parse place data ({document.id})",
                )
        return AccessResult.ok(places)

    async def get_place(self, place_id: str) -> AccessResult[Place]:
        result, _ = await self._fetch(place_id)
        return result

    async def add_place(self, draft: Place, image: ImageSource | None = None) -> AccessResult[str]:
        user_id = self.session.current_user_id()
        if user_id is None:
            return AccessResult.fail(AccessErrorKind.UNAUTHENTICATED, "User not logged in")

        try:
            image_url = await self._upload(user_id, image) if image else ""
            place = draft.copy(
                id="",
                image_url=image_url,
                owner_id=user_id,
                created_at=_as_utc(draft.created_at or self._clock()),
            )
            document = await self.documents.create(self.collection, place_to_fields(place))
        except (BackendError, OSError, ValueError) as e:
            return self._failure(e)

        logger.info(f"[Places] {user_id} added {document.id}")
        return AccessResult.ok(document.id)

    async def update_place(self, place: Place, image: ImageSource | None = None) -> AccessResult[None]:
        user_id = self.session.current_user_id()
        if user_id is None:
            return AccessResult.fail(AccessErrorKind.UNAUTHENTICATED, "User not logged in")

        existing, version = await self._fetch(place.id)
        if existing.is_failure:
            return AccessResult.from_error(existing.error)
        stored = existing.value
        if not stored.is_owned_by(user_id):
            return AccessResult.fail(AccessErrorKind.FORBIDDEN, "You can only edit your own places")

        try:
            image_url = await self._upload(user_id, image) if image else place.image_url
            updated = place.copy(
                image_url=image_url,
                owner_id=stored.owner_id,
                created_at=_as_utc(place.created_at or stored.created_at or self._clock()),
            )
            await self.documents.overwrite(
                self.collection, place.id, place_to_fields(updated), if_version=version
            )
        except (BackendError, OSError, ValueError) as e:
            return self._failure(e)

        logger.info(f"[Places] {user_id} updated {place.id}")
        return AccessResult.ok(None)

    async def delete_place(self, place_id: str) -> AccessResult[None]:
        user_id = self.session.current_user_id()
        if user_id is None:
            return AccessResult.fail(AccessErrorKind.UNAUTHENTICATED, "User not logged in")

        existing, version = await self._fetch(place_id)
        if existing.is_failure:
            return AccessResult.from_error(existing.error)
        stored = existing.value
        if not stored.is_owned_by(user_id):
            return AccessResult.fail(AccessErrorKind.FORBIDDEN, "You can only delete your own places")

        if stored.has_image:
            try:
                await self.blobs.delete_by_url(stored.image_url)
            except (BackendError, ValueError) as e:
                # An orphaned photo must not block deleting the place.
                logger.warning(f"[Places] Could not delete image of {place_id}: {e}")

        try:
            await self.documents.delete(self.collection, place_id, if_version=version)
        except BackendError as e:
            return self._failure(e)

        logger.info(f"[Places] {user_id} deleted {place_id}")
        return AccessResult.ok(None)

    def image_reference(self, user_id: str, image: ImageSource) -> str:
        """Blob reference for an image, derived from its source locator."""
        digest = hashlib.sha256(image.locator.encode("utf-8")).hexdigest()[:32]
        return f"{self.image_prefix}/{user_id}/{digest}{image.suffix}"

    async def _upload(self, user_id: str, image: ImageSource) -> str:
        reference = self.image_reference(user_id, image)
        blob = await self.blobs.upload(reference, image.read_bytes(), image.mime_type)
        logger.debug(f"[Places] Uploaded {image.locator} as {blob.reference}")
        return blob.download_url

    async def _fetch(self, place_id: str) -> tuple[AccessResult[Place], str | None]:
        """Read a place and the version token of its document."""
        if not place_id:
            return AccessResult.fail(AccessErrorKind.NOT_FOUND, "Place not found"), None
        try:
            document = await self.documents.get(self.collection, place_id)
        except NotFoundError:
            return AccessResult.fail(AccessErrorKind.NOT_FOUND, "Place not found"), None
        except BackendError as e:
            return self._failure(e), None

        try:
            place = place_from_document(document)
        except MalformedRecordError as e:
            logger.warning(f"[Places] Document {place_id} is malformed: {e}")
            return AccessResult.fail(AccessErrorKind.MALFORMED_RECORD, "Unable to parse place data"), None
        return AccessResult.ok(place), document.version

    @staticmethod
    def _failure(error: Exception) -> AccessResult:
        if isinstance(error, NotFoundError):
            kind = AccessErrorKind.NOT_FOUND
        elif isinstance(error, MalformedDocumentError):
            kind = AccessErrorKind.MALFORMED_RECORD
        elif isinstance(error, PreconditionFailedError):
            kind = AccessErrorKind.CONFLICT
        elif isinstance(error, PermissionDeniedError):
            kind = AccessErrorKind.FORBIDDEN
        elif isinstance(error, AuthenticationError):
            kind = AccessErrorKind.UNAUTHENTICATED
        else:
            kind = AccessErrorKind.STORE_UNAVAILABLE
        logger.warning(f"[Places] Operation failed ({kind.value}): {error}")
        return AccessResult.fail(kind, str(error) or kind.value)
