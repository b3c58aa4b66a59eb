"""Tests for the Firebase REST clients using a mocked transport."""

import json
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs

import httpx
import pytest

from travel_log.domain.entities.session import AuthSession
from travel_log.infrastructure.backend.base import SortDirection
from travel_log.infrastructure.backend.errors import (
    AuthenticationError,
    MalformedDocumentError,
    NotFoundError,
    PermissionDeniedError,
    PreconditionFailedError,
    StoreUnavailableError,
)
from travel_log.infrastructure.firebase import (
    FirebaseAuth,
    FirebaseConfig,
    FirebaseStorage,
    FirestoreDocumentStore,
)

CONFIG = FirebaseConfig(api_key="test-key", project_id="demo")
DOCS = "https://firestore.googleapis.com/v1/projects/demo/databases/(default)/documents"
OBJECTS = "https://firebasestorage.googleapis.com/v0/b/demo.appspot.com/o"


class Recorder:
    """Mock transport handler that records requests and replays responses."""

    def __init__(self, *responses: httpx.Response):
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responses.pop(0)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


def google_error(status_code: int, status: str, message: str = "boom") -> httpx.Response:
    return httpx.Response(
        status_code, json={"error": {"code": status_code, "status": status, "message": message}}
    )


def document_payload(doc_id: str, update_time: str = "2024-05-01T10:00:00.000001Z", **fields):
    return {
        "name": f"projects/demo/databases/(default)/documents/places/{doc_id}",
        "fields": {key: {"stringValue": value} for key, value in fields.items()},
        "updateTime": update_time,
    }


async def static_token():
    return "id-token"


class TestFirebaseConfig:
    def test_storage_bucket_defaults_to_project(self):
        assert CONFIG.storage_bucket == "demo.appspot.com"
        assert CONFIG.documents_url == DOCS
        assert CONFIG.objects_url == OBJECTS

    def test_requires_credentials(self):
        with pytest.raises(ValueError):
            FirebaseConfig(api_key="", project_id="demo")
        with pytest.raises(ValueError):
            FirebaseConfig(api_key="k", project_id="")


class TestFirebaseAuth:
    async def test_sign_in_starts_session(self):
        recorder = Recorder(httpx.Response(200, json={
            "localId": "u1",
            "email": "ada@example.com",
            "idToken": "tok",
            "refreshToken": "ref",
            "expiresIn": "3600",
        }))
        auth = FirebaseAuth(CONFIG, http_client=recorder.client())

        session = await auth.sign_in("ada@example.com", "secret1")

        assert session.user_id == "u1"
        assert auth.current_user_id() == "u1"
        assert not session.is_expired()
        request = recorder.last
        assert request.url.path == "/v1/accounts:signInWithPassword"
        assert request.url.params["key"] == "test-key"
        assert json.loads(request.content) == {
            "email": "ada@example.com",
            "password": "secret1",
            "returnSecureToken": True,
        }

    async def test_error_codes_become_readable_messages(self):
        recorder = Recorder(httpx.Response(400, json={"error": {
            "code": 400,
            "message": "WEAK_PASSWORD : Password should be at least 6 characters",
        }}))
        auth = FirebaseAuth(CONFIG, http_client=recorder.client())

        with pytest.raises(AuthenticationError) as excinfo:
            await auth.sign_up("ada@example.com", "123")

        assert excinfo.value.code == "WEAK_PASSWORD"
        assert "at least 6 characters" in excinfo.value.message
        assert recorder.last.url.path == "/v1/accounts:signUp"
        assert auth.session is None

    async def test_expired_token_is_refreshed(self):
        recorder = Recorder(httpx.Response(200, json={
            "id_token": "fresh",
            "refresh_token": "ref2",
            "expires_in": "3600",
            "user_id": "u1",
        }))
        auth = FirebaseAuth(CONFIG, http_client=recorder.client())
        auth._session = AuthSession(
            user_id="u1",
            id_token="stale",
            refresh_token="ref1",
            expires_at=datetime.now(timezone.utc) - timedelta(minutes=5),
        )

        token = await auth.get_id_token()

        assert token == "fresh"
        assert auth.session.refresh_token == "ref2"
        form = parse_qs(recorder.last.content.decode())
        assert form == {"grant_type": ["refresh_token"], "refresh_token": ["ref1"]}

    async def test_refresh_without_session_fails(self):
        auth = FirebaseAuth(CONFIG, http_client=Recorder().client())

        with pytest.raises(AuthenticationError):
            await auth.refresh()
        assert await auth.get_id_token() is None

    async def test_session_is_shared_through_file(self, tmp_path):
        session_file = tmp_path / "session.json"
        recorder = Recorder(httpx.Response(200, json={
            "localId": "u1", "email": "ada@example.com", "idToken": "tok", "refreshToken": "ref",
        }))
        first = FirebaseAuth(CONFIG, http_client=recorder.client(), session_file=session_file)
        await first.sign_in("ada@example.com", "secret1")

        second = FirebaseAuth(CONFIG, http_client=recorder.client(), session_file=session_file)
        assert second.current_user_id() == "u1"

        second.sign_out()
        assert not session_file.exists()

    async def test_unreadable_session_file_is_ignored(self, tmp_path):
        session_file = tmp_path / "session.json"
        session_file.write_text("{not json", encoding="utf-8")

        auth = FirebaseAuth(CONFIG, http_client=Recorder().client(), session_file=session_file)

        assert auth.session is None


class TestFirestoreDocumentStore:
    async def test_create_sends_typed_fields_and_token(self):
        recorder = Recorder(httpx.Response(200, json=document_payload("new1", name="Louvre")))
        store = FirestoreDocumentStore(CONFIG, static_token, recorder.client())

        document = await store.create("places", {"name": "Louvre", "rating": 5.0})

        assert document.id == "new1"
        assert document.fields == {"name": "Louvre"}
        assert document.version == "2024-05-01T10:00:00.000001Z"
        request = recorder.last
        assert request.method == "POST"
        assert str(request.url) == f"{DOCS}/places"
        assert request.headers["Authorization"] == "Bearer id-token"
        assert json.loads(request.content) == {
            "fields": {"name": {"stringValue": "Louvre"}, "rating": {"doubleValue": 5.0}}
        }

    async def test_missing_document_raises_not_found(self):
        recorder = Recorder(google_error(404, "NOT_FOUND"))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        with pytest.raises(NotFoundError):
            await store.get("places", "ghost")
        assert "Authorization" not in recorder.last.headers

    async def test_overwrite_is_conditional_on_version(self):
        recorder = Recorder(
            httpx.Response(200, json=document_payload("p1", "2024-05-02T00:00:00Z", name="New")),
            google_error(400, "FAILED_PRECONDITION"),
        )
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        await store.overwrite("places", "p1", {"name": "New"}, if_version="2024-05-01T00:00:00Z")
        request = recorder.last
        assert request.method == "PATCH"
        assert request.url.params["currentDocument.updateTime"] == "2024-05-01T00:00:00Z"
        assert "updateMask.fieldPaths" not in request.url.params

        with pytest.raises(PreconditionFailedError):
            await store.overwrite("places", "p1", {"name": "Newer"}, if_version="stale")

    async def test_overwrite_without_version_requires_existing_document(self):
        recorder = Recorder(httpx.Response(200, json=document_payload("p1", name="New")))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        await store.overwrite("places", "p1", {"name": "New"})

        assert recorder.last.url.params["currentDocument.exists"] == "true"

    async def test_delete_passes_version(self):
        recorder = Recorder(httpx.Response(200, json={}))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        await store.delete("places", "p1", if_version="v1")

        assert recorder.last.method == "DELETE"
        assert recorder.last.url.params["currentDocument.updateTime"] == "v1"

    async def test_query_orders_and_skips_partial_results(self):
        recorder = Recorder(httpx.Response(200, json=[
            {"document": document_payload("b", name="B"), "readTime": "2024-05-01T00:00:00Z"},
            {"document": document_payload("a", name="A"), "readTime": "2024-05-01T00:00:00Z"},
            {"readTime": "2024-05-01T00:00:00Z"},
        ]))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        documents = await store.query("places", order_by="createdAt", direction=SortDirection.DESCENDING)

        assert [d.id for d in documents] == ["b", "a"]
        assert str(recorder.last.url) == f"{DOCS}:runQuery"
        assert json.loads(recorder.last.content) == {"structuredQuery": {
            "from": [{"collectionId": "places"}],
            "orderBy": [{"field": {"fieldPath": "createdAt"}, "direction": "DESCENDING"}],
        }}

    @pytest.mark.parametrize("payload", [
        {"fields": {"name": {"stringValue": "No resource name"}}},
        document_payload("p1") | {"fields": {"name": {"mysteryValue": "?"}}},
        document_payload("p1") | {"fields": {"visits": {"integerValue": "many"}}},
        ["not", "a", "document"],
    ])
    async def test_undecodable_document_is_malformed(self, payload):
        recorder = Recorder(httpx.Response(200, json=payload))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        with pytest.raises(MalformedDocumentError):
            await store.get("places", "p1")

    async def test_undecodable_query_result_is_malformed(self):
        recorder = Recorder(httpx.Response(200, json=[
            {"document": document_payload("a", name="A")},
            {"document": {"fields": {}}},
        ]))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        with pytest.raises(MalformedDocumentError):
            await store.query("places")

    async def test_permission_denied(self):
        recorder = Recorder(google_error(403, "PERMISSION_DENIED"))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        with pytest.raises(PermissionDeniedError):
            await store.query("places")

    async def test_transport_failure_is_store_unavailable(self):
        def offline(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(offline))
        store = FirestoreDocumentStore(CONFIG, http_client=client)

        with pytest.raises(StoreUnavailableError):
            await store.get("places", "p1")

    async def test_server_error_is_store_unavailable(self):
        recorder = Recorder(google_error(429, "RESOURCE_EXHAUSTED", "Quota exceeded"))
        store = FirestoreDocumentStore(CONFIG, http_client=recorder.client())

        with pytest.raises(StoreUnavailableError) as excinfo:
            await store.get("places", "p1")
        assert excinfo.value.message == "Quota exceeded"


class TestFirebaseStorage:
    async def test_upload_returns_token_download_url(self):
        recorder = Recorder(httpx.Response(200, json={
            "name": "place_images/u1/abc.jpg",
            "contentType": "image/jpeg",
            "size": "4",
            "downloadTokens": "tok1,tok2",
        }))
        storage = FirebaseStorage(CONFIG, static_token, recorder.client())

        blob = await storage.upload("place_images/u1/abc.jpg", b"jpeg", "image/jpeg")

        assert blob.download_url == f"{OBJECTS}/place_images%2Fu1%2Fabc.jpg?alt=media&token=tok1"
        assert blob.size == 4
        request = recorder.last
        assert request.url.params["name"] == "place_images/u1/abc.jpg"
        assert request.headers["Content-Type"] == "image/jpeg"
        assert request.headers["Authorization"] == "Firebase id-token"
        assert request.content == b"jpeg"

    async def test_upload_without_token_fails(self):
        recorder = Recorder(httpx.Response(200, json={"name": "x.jpg"}))
        storage = FirebaseStorage(CONFIG, http_client=recorder.client())

        with pytest.raises(StoreUnavailableError):
            await storage.upload("x.jpg", b"data")

    def test_reference_from_download_url(self):
        storage = FirebaseStorage(CONFIG, http_client=Recorder().client())
        url = storage.download_url("place_images/u1/abc.jpg", "tok")

        assert storage.reference_from_url(url) == "place_images/u1/abc.jpg"
        assert storage.reference_from_url("gs://demo.appspot.com/a/b.png") == "a/b.png"

    @pytest.mark.parametrize("url", [
        "gs://other-bucket/a.png",
        "https://example.com/a.png",
        "not a url",
    ])
    def test_foreign_urls_are_rejected(self, url):
        storage = FirebaseStorage(CONFIG, http_client=Recorder().client())

        with pytest.raises(ValueError):
            storage.reference_from_url(url)

    async def test_delete_by_url_targets_encoded_object(self):
        recorder = Recorder(httpx.Response(204))
        storage = FirebaseStorage(CONFIG, http_client=recorder.client())

        await storage.delete_by_url(f"{OBJECTS}/place_images%2Fu1%2Fabc.jpg?alt=media&token=t")

        assert recorder.last.method == "DELETE"
        assert recorder.last.url.raw_path.decode() == "/v0/b/demo.appspot.com/o/place_images%2Fu1%2Fabc.jpg"

    async def test_delete_missing_object(self):
        recorder = Recorder(google_error(404, "NOT_FOUND", "Not Found."))
        storage = FirebaseStorage(CONFIG, http_client=recorder.client())

        with pytest.raises(NotFoundError):
            await storage.delete("gone.jpg")
