"""Firebase Authentication client (email/password over REST)."""

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

import httpx

from travel_log.domain.entities.session import AuthSession
from travel_log.infrastructure.backend.base import IdentityProvider
from travel_log.infrastructure.backend.errors import AuthenticationError
from travel_log.infrastructure.firebase.http import (
    FirebaseConfig,
    create_http_client,
    error_payload,
    json_body,
    send,
)

logger = logging.getLogger("travel_log.firebase.auth")

# Messages shown to users for the error codes the Identity Toolkit returns.
ERROR_MESSAGES: dict[str, str] = {
    "EMAIL_EXISTS": "The email address is already in use by another account.",
    "EMAIL_NOT_FOUND": "The supplied auth credential is incorrect, malformed or has expired.",
    "INVALID_PASSWORD": "The supplied auth credential is incorrect, malformed or has expired.",
    "INVALID_LOGIN_CREDENTIALS": "The supplied auth credential is incorrect, malformed or has expired.",
    "INVALID_EMAIL": "The email address is badly formatted.",
    "MISSING_PASSWORD": "The password must not be empty.",
    "WEAK_PASSWORD": "The given password is invalid. Password should be at least 6 characters.",
    "USER_DISABLED": "The user account has been disabled by an administrator.",
    "TOO_MANY_ATTEMPTS_TRY_LATER": (
        "We have blocked all requests from this device due to unusual activity. Try again later."
    ),
    "TOKEN_EXPIRED": "The user's credential is no longer valid. The user must sign in again.",
    "INVALID_REFRESH_TOKEN": "The user's credential is no longer valid. The user must sign in again.",
    "USER_NOT_FOUND": "There is no user record corresponding to this identifier.",
}


class FirebaseAuth(IdentityProvider):
    """Email/password identity backed by the Identity Toolkit REST API.

    The session can be persisted to ``session_file`` so that separate
    processes (e.g. successive CLI invocations) share one sign-in.
    Expired ID tokens are refreshed on demand by :meth:`get_id_token`.
    """

    def __init__(
        self,
        config: FirebaseConfig,
        http_client: httpx.AsyncClient | None = None,
        session_file: Path | None = None,
    ):
        self.config = config
        self._client = http_client or create_http_client(config)
        self._owns_client = http_client is None
        self.session_file = session_file
        self._session: AuthSession | None = self._load_session()

    @property
    def session(self) -> AuthSession | None:
        return self._session

    async def sign_up(self, email: str, password: str) -> AuthSession:
        payload = await self._account_request("accounts:signUp", email, password)
        self._set_session(self._session_from_account(payload))
        logger.info(f"[Auth] Registered {email}")
        return self._session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        payload = await self._account_request("accounts:signInWithPassword", email, password)
        self._set_session(self._session_from_account(payload))
        logger.info(f"[Auth] Signed in {email}")
        return self._session

    def sign_out(self) -> None:
        if self._session:
            logger.info(f"[Auth] Signed out {self._session.email or self._session.user_id}")
        self._set_session(None)

    async def get_id_token(self) -> str | None:
        """Return a valid ID token for the current user, refreshing if needed."""
        if self._session is None:
            return None
        if self._session.is_expired():
            await self.refresh()
        return self._session.id_token

    async def refresh(self) -> AuthSession:
        """Exchange the refresh token for a new ID token."""
        if self._session is None or not self._session.refresh_token:
            raise AuthenticationError("User not logged in", code="NO_SESSION")

        response = await send(
            self._client,
            "POST",
            self.config.token_url,
            params={"key": self.config.api_key},
            data={"grant_type": "refresh_token", "refresh_token": self._session.refresh_token},
        )
        if not response.is_success:
            raise self._auth_error(response)

        payload = json_body(response)
        self._set_session(AuthSession(
            user_id=payload.get("user_id", self._session.user_id),
            email=self._session.email,
            id_token=payload["id_token"],
            refresh_token=payload.get("refresh_token", self._session.refresh_token),
            expires_at=self._expiry(payload.get("expires_in")),
        ))
        logger.debug(f"[Auth] Refreshed token for {self._session.user_id}")
        return self._session

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _account_request(self, endpoint: str, email: str, password: str) -> dict[str, Any]:
        response = await send(
            self._client,
            "POST",
            f"{self.config.auth_url}/{endpoint}",
            params={"key": self.config.api_key},
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        if not response.is_success:
            raise self._auth_error(response)
        return json_body(response)

    @staticmethod
    def _auth_error(response: httpx.Response) -> AuthenticationError:
        raw = error_payload(response).get("message") or f"HTTP {response.status_code}"
        # e.g. "WEAK_PASSWORD : Password should be at least 6 characters"
        code = raw.split(" : ", 1)[0].strip()
        message = ERROR_MESSAGES.get(code, raw)
        logger.warning(f"[Auth] Request failed: {raw}")
        return AuthenticationError(message, code=code, status_code=response.status_code)

    def _session_from_account(self, payload: dict[str, Any]) -> AuthSession:
        return AuthSession(
            user_id=payload["localId"],
            email=payload.get("email", ""),
            id_token=payload["idToken"],
            refresh_token=payload.get("refreshToken", ""),
            expires_at=self._expiry(payload.get("expiresIn")),
        )

    @staticmethod
    def _expiry(expires_in: str | int | None) -> datetime | None:
        if expires_in is None:
            return None
        return datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))

    def _set_session(self, session: AuthSession | None) -> None:
        self._session = session
        if self.session_file is None:
            return
        if session is None:
            self.session_file.unlink(missing_ok=True)
            return
        self.session_file.parent.mkdir(parents=True, exist_ok=True)
        self.session_file.write_text(json.dumps(session.to_dict()), encoding="utf-8")
        self.session_file.chmod(0o600)

    def _load_session(self) -> AuthSession | None:
        if self.session_file is None or not self.session_file.exists():
            return None
        try:
            return AuthSession.from_dict(json.loads(self.session_file.read_text(encoding="utf-8")))
        except (ValueError, KeyError) as e:
            logger.warning(f"[Auth] Ignoring unreadable session file {self.session_file}: {e}")
            return None
