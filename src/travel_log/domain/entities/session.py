"""Authenticated user session."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any


@dataclass
class AuthSession:
    """Identity of the signed-in user and the tokens proving it."""

    user_id: str
    email: str = ""
    id_token: str = ""
    refresh_token: str = ""
    expires_at: datetime | None = None

    def is_expired(self, leeway: timedelta = timedelta(seconds=60)) -> bool:
        """Check if the id token expires within ``leeway``."""
        if self.expires_at is None:
            return False
        return datetime.now(timezone.utc) + leeway >= self.expires_at

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "id_token": self.id_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthSession":
        """Build a session from :meth:`to_dict` output."""
        expires_at = data.get("expires_at")
        return cls(
            user_id=data["user_id"],
            email=data.get("email", ""),
            id_token=data.get("id_token", ""),
            refresh_token=data.get("refresh_token", ""),
            expires_at=datetime.fromisoformat(expires_at) if expires_at else None,
        )

    def __str__(self) -> str:
        return f"AuthSession({self.email or self.user_id})"
