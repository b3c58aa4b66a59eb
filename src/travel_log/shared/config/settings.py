"""Application settings using Pydantic."""

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import SecretStr, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackendSettings(BaseSettings):
    """Backend selection settings."""
    model_config = SettingsConfigDict(env_prefix="BACKEND_")

    provider: str = "firebase"
    places_collection: str = "places"
    image_prefix: str = "place_images"


class FirebaseSettings(BaseSettings):
    """Firebase project settings."""
    model_config = SettingsConfigDict(env_prefix="FIREBASE_")

    api_key: SecretStr | None = None
    project_id: str = ""
    storage_bucket: str = ""
    database: str = "(default)"
    auth_url: str = "https://identitytoolkit.googleapis.com/v1"
    token_url: str = "https://securetoken.googleapis.com/v1/token"
    firestore_url: str = "https://firestore.googleapis.com/v1"
    storage_url: str = "https://firebasestorage.googleapis.com/v0"
    timeout: float = 30.0


class LoggingSettings(BaseSettings):
    """Logging settings."""
    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "WARNING"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_enabled: bool = False
    file_path: str = "./logs/travel_log.log"
    console_enabled: bool = True
    console_colored: bool = True


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    # Application info
    app_name: str = "Travel Log"
    app_version: str = "1.0.0"
    debug: bool = False

    # Paths
    data_path: Path = Path("~/.travel_log")
    session_file: str = "session.json"

    # Sub-settings
    backend: BackendSettings = Field(default_factory=BackendSettings)
    firebase: FirebaseSettings = Field(default_factory=FirebaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @property
    def session_path(self) -> Path:
        """Where the signed-in session is persisted."""
        return self.data_path.expanduser() / self.session_file

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        self.data_path.expanduser().mkdir(parents=True, exist_ok=True)
        if self.logging.file_enabled:
            Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)

    def get_firebase_config(self) -> dict[str, Any]:
        """Get Firebase configuration as dictionary."""
        return {
            "api_key": self.firebase.api_key.get_secret_value() if self.firebase.api_key else "",
            "project_id": self.firebase.project_id,
            "storage_bucket": self.firebase.storage_bucket,
            "database": self.firebase.database,
            "auth_url": self.firebase.auth_url,
            "token_url": self.firebase.token_url,
            "firestore_url": self.firebase.firestore_url,
            "storage_url": self.firebase.storage_url,
            "timeout": self.firebase.timeout,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
