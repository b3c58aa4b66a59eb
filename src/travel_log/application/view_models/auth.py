"""State holder for the login and register screens."""

from dataclasses import dataclass
from enum import Enum

from travel_log.application.view_models.base import ViewModel
from travel_log.domain.entities.session import AuthSession
from travel_log.domain.repositories.auth_repository import AuthRepository


class AuthStatus(Enum):
    """Authentication flow status."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    SIGNED_OUT = "signed_out"
    ERROR = "error"


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus
    message: str = ""


class AuthViewModel(ViewModel):
    """Maps auth repository results to observable screen state."""

    def __init__(self, repository: AuthRepository):
        super().__init__()
        self.repository = repository
        self.auth_state = AuthState(AuthStatus.IDLE)

    @property
    def is_user_logged_in(self) -> bool:
        return self.repository.is_user_logged_in

    @property
    def current_user(self) -> AuthSession | None:
        return self.repository.current_user

    async def sign_up(self, email: str, password: str, confirm_password: str | None = None) -> AuthState:
        """Register a new account.

        Args:
            email: Account email
            password: Chosen password
            confirm_password: Repeated password; must match when given
        """
        if not email.strip() or not password.strip():
            return self._auth(AuthState(AuthStatus.ERROR, "Email and password must not be empty"))
        if confirm_password is not None and password != confirm_password:
            return self._auth(AuthState(AuthStatus.ERROR, "Passwords do not match"))

        self._auth(AuthState(AuthStatus.LOADING))
        result = await self.repository.sign_up(email.strip(), password)
        if result.success:
            return self._auth(AuthState(AuthStatus.SUCCESS))
        return self._auth(AuthState(AuthStatus.ERROR, result.message or "Sign up failed"))

    async def sign_in(self, email: str, password: str) -> AuthState:
        """Sign in to an existing account."""
        if not email.strip() or not password.strip():
            return self._auth(AuthState(AuthStatus.ERROR, "Email and password must not be empty"))

        self._auth(AuthState(AuthStatus.LOADING))
        result = await self.repository.sign_in(email.strip(), password)
        if result.success:
            return self._auth(AuthState(AuthStatus.SUCCESS))
        return self._auth(AuthState(AuthStatus.ERROR, result.message or "Sign in failed"))

    def sign_out(self) -> None:
        self.repository.sign_out()
        self._auth(AuthState(AuthStatus.SIGNED_OUT))

    def reset_state(self) -> None:
        self._auth(AuthState(AuthStatus.IDLE))

    def _auth(self, state: AuthState) -> AuthState:
        self._set_state("auth_state", state)
        return state
