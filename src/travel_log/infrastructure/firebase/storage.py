"""Cloud Storage for Firebase blob store over the REST API."""

import logging
from typing import Any, BinaryIO
from urllib.parse import quote, unquote, urlparse

import httpx

from travel_log.infrastructure.backend.base import BlobStore, StoredBlob
from travel_log.infrastructure.backend.errors import StoreUnavailableError
from travel_log.infrastructure.firebase.firestore import TokenSource
from travel_log.infrastructure.firebase.http import (
    FirebaseConfig,
    create_http_client,
    error_from_response,
    json_body,
    send,
)

logger = logging.getLogger("travel_log.firebase.storage")


class FirebaseStorage(BlobStore):
    """Blob store for one Firebase Storage bucket.

    Download URLs are the token-bearing ``?alt=media`` URLs Firebase
    hands out to clients; they stay valid until the object is deleted.
    """

    def __init__(
        self,
        config: FirebaseConfig,
        token_source: TokenSource | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config
        self._token_source = token_source
        self._client = http_client or create_http_client(config)
        self._owns_client = http_client is None

    async def upload(
        self,
        reference: str,
        data: bytes | BinaryIO,
        content_type: str | None = None,
    ) -> StoredBlob:
        payload = data if isinstance(data, (bytes, bytearray)) else data.read()
        headers = await self._headers()
        headers["Content-Type"] = content_type or "application/octet-stream"

        response = await send(
            self._client,
            "POST",
            self.config.objects_url,
            params={"name": reference},
            content=bytes(payload),
            headers=headers,
        )
        if not response.is_success:
            raise error_from_response(response)

        metadata = json_body(response)
        tokens = (metadata.get("downloadTokens") or "").split(",")
        if not tokens[0]:
            raise StoreUnavailableError(f"Upload of {reference} returned no download token")

        logger.info(f"[Storage] Uploaded {reference} ({len(payload)} bytes)")
        return StoredBlob(
            reference=metadata.get("name", reference),
            download_url=self.download_url(metadata.get("name", reference), tokens[0]),
            content_type=metadata.get("contentType", content_type),
            size=int(metadata.get("size", len(payload))),
        )

    async def delete(self, reference: str) -> None:
        response = await send(
            self._client,
            "DELETE",
            f"{self.config.objects_url}/{quote(reference, safe='')}",
            headers=await self._headers(),
        )
        if not response.is_success:
            raise error_from_response(response)
        logger.info(f"[Storage] Deleted {reference}")

    def download_url(self, reference: str, token: str) -> str:
        return f"{self.config.objects_url}/{quote(reference, safe='')}?alt=media&token={token}"

    def reference_from_url(self, url: str) -> str:
        parsed = urlparse(url)
        bucket = self.config.storage_bucket

        if parsed.scheme == "gs":
            if parsed.netloc != bucket:
                raise ValueError(f"URL points to bucket {parsed.netloc!r}, expected {bucket!r}")
            return parsed.path.lstrip("/")

        prefix = urlparse(self.config.objects_url).path + "/"
        if parsed.scheme in ("http", "https") and parsed.path.startswith(prefix):
            reference = unquote(parsed.path[len(prefix):])
            if reference:
                return reference
        raise ValueError(f"Not a download URL for bucket {bucket!r}: {url}")

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _headers(self) -> dict[str, Any]:
        if self._token_source is None:
            return {}
        token = await self._token_source()
        return {"Authorization": f"Firebase {token}"} if token else {}
