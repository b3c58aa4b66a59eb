"""Auth repository interface."""

from abc import ABC, abstractmethod

from travel_log.domain.entities.session import AuthSession
from travel_log.domain.value_objects.access_result import AccessResult


class AuthRepository(ABC):
    """Repository interface for user accounts and sessions."""

    @property
    @abstractmethod
    def current_user(self) -> AuthSession | None:
        """The signed-in user, if any."""
        pass

    @property
    def is_user_logged_in(self) -> bool:
        """Check if a user is signed in."""
        return self.current_user is not None

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AccessResult[AuthSession]:
        """Create an account and sign it in."""
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AccessResult[AuthSession]:
        """Sign in with email and password."""
        pass

    @abstractmethod
    def sign_out(self) -> None:
        """Forget the current session."""
        pass
