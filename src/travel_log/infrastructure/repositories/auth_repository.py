"""Auth repository backed by an identity provider."""

import logging

from travel_log.domain.entities.session import AuthSession
from travel_log.domain.repositories.auth_repository import AuthRepository
from travel_log.domain.value_objects.access_result import AccessErrorKind, AccessResult
from travel_log.infrastructure.backend.base import IdentityProvider
from travel_log.infrastructure.backend.errors import AuthenticationError, BackendError

logger = logging.getLogger("travel_log.auth")


class IdentityAuthRepository(AuthRepository):
    """Sign-up, sign-in and sign-out through an :class:`IdentityProvider`."""

    def __init__(self, identity: IdentityProvider):
        self.identity = identity

    @property
    def current_user(self) -> AuthSession | None:
        return self.identity.session

    async def sign_up(self, email: str, password: str) -> AccessResult[AuthSession]:
        try:
            return AccessResult.ok(await self.identity.sign_up(email, password))
        except BackendError as e:
            return self._failure(e)

    async def sign_in(self, email: str, password: str) -> AccessResult[AuthSession]:
        try:
            return AccessResult.ok(await self.identity.sign_in(email, password))
        except BackendError as e:
            return self._failure(e)

    def sign_out(self) -> None:
        self.identity.sign_out()

    @staticmethod
    def _failure(error: BackendError) -> AccessResult[AuthSession]:
        if isinstance(error, AuthenticationError):
            kind = AccessErrorKind.UNAUTHENTICATED
        else:
            kind = AccessErrorKind.STORE_UNAVAILABLE
        logger.info(f"[Auth] {kind.value}: {error}")
        return AccessResult.fail(kind, str(error))
