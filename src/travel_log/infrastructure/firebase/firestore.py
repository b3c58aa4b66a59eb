"""Cloud Firestore document store over the REST API."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import quote

import httpx

from travel_log.infrastructure.backend.base import DocumentStore, SortDirection, StoredDocument
from travel_log.infrastructure.backend.errors import MalformedDocumentError
from travel_log.infrastructure.firebase.http import (
    FirebaseConfig,
    create_http_client,
    error_from_response,
    json_body,
    send,
)
from travel_log.infrastructure.firebase.values import decode_fields, document_id, encode_fields

logger = logging.getLogger("travel_log.firebase.firestore")

TokenSource = Callable[[], Awaitable[str | None]]


class FirestoreDocumentStore(DocumentStore):
    """Firestore client authenticated as the signed-in end user.

    Requests carry the user's ID token so that Firestore security rules
    apply exactly as they would for the mobile app. Without a token the
    requests are anonymous.
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

    async def create(self, collection: str, fields: dict[str, Any]) -> StoredDocument:
        payload = await self._request(
            "POST",
            f"{self.config.documents_url}/{quote(collection)}",
            json={"fields": encode_fields(fields)},
        )
        document = self._to_document(payload)
        logger.info(f"[Firestore] Created {collection}/{document.id}")
        return document

    async def get(self, collection: str, document_id: str) -> StoredDocument:
        payload = await self._request("GET", self._document_url(collection, document_id))
        return self._to_document(payload)

    async def overwrite(
        self,
        collection: str,
        document_id: str,
        fields: dict[str, Any],
        *,
        if_version: str | None = None,
    ) -> StoredDocument:
        # No updateMask: every field not sent is removed.
        if if_version is not None:
            params = {"currentDocument.updateTime": if_version}
        else:
            params = {"currentDocument.exists": "true"}
        payload = await self._request(
            "PATCH",
            self._document_url(collection, document_id),
            params=params,
            json={"fields": encode_fields(fields)},
        )
        logger.info(f"[Firestore] Overwrote {collection}/{document_id}")
        return self._to_document(payload)

    async def delete(self, collection: str, document_id: str, *, if_version: str | None = None) -> None:
        params = {"currentDocument.updateTime": if_version} if if_version is not None else None
        await self._request("DELETE", self._document_url(collection, document_id), params=params)
        logger.info(f"[Firestore] Deleted {collection}/{document_id}")

    async def query(
        self,
        collection: str,
        order_by: str | None = None,
        direction: SortDirection = SortDirection.ASCENDING,
    ) -> list[StoredDocument]:
        structured_query: dict[str, Any] = {"from": [{"collectionId": collection}]}
        if order_by is not None:
            structured_query["orderBy"] = [
                {"field": {"fieldPath": order_by}, "direction": direction.value}
            ]
        results = await self._request(
            "POST",
            f"{self.config.documents_url}:runQuery",
            json={"structuredQuery": structured_query},
        )
        if not isinstance(results, list):
            raise MalformedDocumentError(f"Unexpected runQuery response for {collection}")
        # Each entry is a partial result; only some carry a document.
        documents = [
            self._to_document(r["document"]) for r in results if isinstance(r, dict) and "document" in r
        ]
        logger.debug(f"[Firestore] Query on {collection} returned {len(documents)} documents")
        return documents

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _document_url(self, collection: str, document_id: str) -> str:
        if not document_id:
            raise ValueError("Document ID must not be empty")
        return f"{self.config.documents_url}/{quote(collection)}/{quote(document_id, safe='')}"

    async def _headers(self) -> dict[str, str]:
        if self._token_source is None:
            return {}
        token = await self._token_source()
        return {"Authorization": f"Bearer {token}"} if token else {}

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        response = await send(self._client, method, url, headers=await self._headers(), **kwargs)
        if not response.is_success:
            error = error_from_response(response)
            logger.warning(f"[Firestore] {method} {url} failed: {error.code} {error.message}")
            raise error
        return json_body(response)

    @staticmethod
    def _to_document(payload: Any) -> StoredDocument:
        try:
            return StoredDocument(
                id=document_id(payload["name"]),
                fields=decode_fields(payload.get("fields")),
                version=payload.get("updateTime"),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise MalformedDocumentError(f"Undecodable document in response: {e!r}") from e
