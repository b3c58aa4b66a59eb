"""Exceptions raised by backend clients."""


class BackendError(Exception):
    """Base class for failures reported by a backend service."""

    def __init__(self, message: str, *, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code


class NotFoundError(BackendError):
    """The addressed document or object does not exist."""


class PreconditionFailedError(BackendError):
    """A conditional write was rejected because the target changed."""


class PermissionDeniedError(BackendError):
    """The backend refused the request for the current identity."""


class AuthenticationError(BackendError):
    """Sign-in, sign-up or token refresh failed."""


class StoreUnavailableError(BackendError):
    """Transport failure, quota exhaustion or an unexpected response."""


class MalformedDocumentError(BackendError):
    """The service returned a document that cannot be decoded."""
