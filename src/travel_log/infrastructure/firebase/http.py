"""Shared HTTP plumbing for the Firebase REST clients."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from travel_log.infrastructure.backend.errors import (
    BackendError,
    NotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
    StoreUnavailableError,
)

logger = logging.getLogger("travel_log.firebase")


@dataclass
class FirebaseConfig:
    """Configuration for the Firebase REST clients."""
    api_key: str
    project_id: str
    storage_bucket: str = ""
    database: str = "(default)"
    auth_url: str = "https://identitytoolkit.googleapis.com/v1"
    token_url: str = "https://securetoken.googleapis.com/v1/token"
    firestore_url: str = "https://firestore.googleapis.com/v1"
    storage_url: str = "https://firebasestorage.googleapis.com/v0"
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.api_key:
            raise ValueError("Firebase API key is required")
        if not self.project_id:
            raise ValueError("Firebase project ID is required")
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")
        if not self.storage_bucket:
            self.storage_bucket = f"{self.project_id}.appspot.com"

    @property
    def documents_url(self) -> str:
        """Root of the Firestore documents resource."""
        return f"{self.firestore_url}/projects/{self.project_id}/databases/{self.database}/documents"

    @property
    def objects_url(self) -> str:
        """Root of the storage bucket's objects resource."""
        return f"{self.storage_url}/b/{self.storage_bucket}/o"


def create_http_client(config: FirebaseConfig) -> httpx.AsyncClient:
    """Build an HTTP client with the configured timeouts."""
    timeout = httpx.Timeout(config.timeout, connect=min(config.timeout, 10.0))
    return httpx.AsyncClient(timeout=timeout)


async def send(client: httpx.AsyncClient, method: str, url: str, **kwargs: Any) -> httpx.Response:
    """Send a request, turning transport failures into backend errors."""
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        logger.warning(f"[HTTP] {method} {url} failed: {e}")
        raise StoreUnavailableError(f"Network request failed: {e}") from e
    logger.debug(f"[HTTP] {method} {url} -> {response.status_code}")
    return response


def error_payload(response: httpx.Response) -> dict[str, Any]:
    """Extract the ``error`` object of a Google API error response."""
    try:
        payload = response.json()
    except ValueError:
        return {}
    if isinstance(payload, list) and payload:
        payload = payload[0]
    if not isinstance(payload, dict):
        return {}
    error = payload.get("error")
    return error if isinstance(error, dict) else {}


def error_from_response(response: httpx.Response) -> BackendError:
    """Map a failed Google API response onto the backend error hierarchy."""
    error = error_payload(response)
    status = error.get("status") or ""
    message = error.get("message") or response.reason_phrase or f"HTTP {response.status_code}"
    code = status or str(response.status_code)

    if response.status_code == 404 or status == "NOT_FOUND":
        return NotFoundError(message, code=code, status_code=response.status_code)
    if response.status_code == 412 or status in ("FAILED_PRECONDITION", "ABORTED"):
        return PreconditionFailedError(message, code=code, status_code=response.status_code)
    if response.status_code in (401, 403) or status in ("PERMISSION_DENIED", "UNAUTHENTICATED"):
        return PermissionDeniedError(message, code=code, status_code=response.status_code)
    return StoreUnavailableError(message, code=code, status_code=response.status_code)


def json_body(response: httpx.Response) -> Any:
    """Decode a successful JSON response."""
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError as e:
        raise StoreUnavailableError(f"Malformed response from {response.request.url}") from e
