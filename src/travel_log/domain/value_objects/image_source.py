"""Image source value object for photo uploads."""

import mimetypes
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import BinaryIO
from urllib.parse import unquote, urlparse


@dataclass(frozen=True)
class ImageSource:
    """A photo picked by the user, ready for upload.

    ``locator`` identifies where the picture came from (a ``file://``
    URI, a content URI, a path). Blob names are derived from it, so the
    same locator always maps to the same stored object.
    """

    locator: str
    data: bytes | BinaryIO
    content_type: str | None = None

    def __post_init__(self) -> None:
        """Validate the image source."""
        if not self.locator:
            raise ValueError("Image locator must not be empty")

    def read_bytes(self) -> bytes:
        """Return the full image payload."""
        if isinstance(self.data, (bytes, bytearray)):
            return bytes(self.data)
        return self.data.read()

    @property
    def suffix(self) -> str:
        """Lower-cased file extension of the locator, if any."""
        path = unquote(urlparse(self.locator).path) or self.locator
        return PurePosixPath(path).suffix.lower()

    @property
    def mime_type(self) -> str:
        """Explicit content type, else a guess from the locator."""
        if self.content_type:
            return self.content_type
        guessed, _ = mimetypes.guess_type(f"image{self.suffix}")
        return guessed or "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> "ImageSource":
        """Load an image from a local file."""
        resolved = Path(path).expanduser().resolve()
        return cls(locator=resolved.as_uri(), data=resolved.read_bytes())
