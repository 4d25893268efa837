from typing import Optional


class FinSyncError(Exception):
    """Base class for errors raised by the sync engine."""


class ValidationError(FinSyncError):
    """Input rejected before any network call."""

    def __init__(self, code: str, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    @classmethod
    def from_left(cls, error: dict) -> "ValidationError":
        details = {k: v for k, v in error.items() if k not in ("error", "message")}
        return cls(error.get("error", "invalid"), error.get("message", "Invalid input"), details)


class NotFoundError(ValidationError):
    pass


class RemoteCallError(FinSyncError):
    """Network failure or non-2xx response from the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.url = url


class UnauthorizedError(RemoteCallError):
    pass
