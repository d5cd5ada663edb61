"""
Custom exceptions for the video repository.

Stores and playlist sources raise these exceptions so callers of
``VideosRepository.refresh()`` only need to handle two failure kinds.
"""


class RepositoryError(Exception):
    """Base exception for all repository errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FetchError(RepositoryError):
    """Raised when fetching the remote playlist fails.

    Covers transport errors, timeouts, bad HTTP status and payloads
    that cannot be decoded. The local store is never written.
    """

    def __init__(self, message: str, url: str | None = None, cause: Exception | None = None):
        details: dict = {}
        if url:
            details["url"] = url
        if cause:
            details["cause"] = str(cause)
        super().__init__(message, details)
        self.url = url
        self.cause = cause


class MalformedPayloadError(FetchError):
    """Raised when the playlist payload does not have the expected shape."""

    def __init__(self, field: str, reason: str, url: str | None = None):
        super().__init__(f"Malformed playlist payload at {field}: {reason}", url=url)
        self.details["field"] = field
        self.details["reason"] = reason
        self.field = field
        self.reason = reason


class StoreError(RepositoryError):
    """Raised when a local store operation fails."""

    def __init__(self, operation: str, path: str | None = None, cause: Exception | None = None):
        details = {"operation": operation}
        if path:
            details["path"] = path
        if cause:
            details["cause"] = str(cause)
        message = f"Store error during {operation}"
        if path:
            message += f": {path}"
        super().__init__(message, details)
        self.operation = operation
        self.path = path
        self.cause = cause
