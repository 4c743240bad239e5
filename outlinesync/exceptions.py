"""Exceptions raised by outlinesync."""

from typing import Optional


class OutlineSyncError(Exception):
    """Base exception for all outlinesync errors."""


class OutlineConfigError(OutlineSyncError):
    """A required configuration value is missing or invalid."""


class OutlineAPIError(OutlineSyncError):
    """The remote service rejected a request (non-2xx, non-429)."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: str = "",
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class OutlineInvalidResponseError(OutlineAPIError):
    """The remote service answered 2xx with a body that is not JSON."""


class OutlineRateLimitError(OutlineSyncError):
    """Rate limited (HTTP 429) on every attempt."""

    def __init__(self, message: str = "Rate limited", retries: int = 0):
        super().__init__(message)
        self.retries = retries


class OutlineNetworkError(OutlineSyncError):
    """Transport-level failure (connection, timeout) on every attempt."""

    def __init__(self, message: str = "Network error", retries: int = 0):
        super().__init__(message)
        self.retries = retries


class LocalIOError(OutlineSyncError):
    """A local file could not be read."""

    def __init__(self, path: str, message: str):
        super().__init__(f"Cannot read {path}: {message}")
        self.path = path


class ChangeSetError(OutlineSyncError):
    """The change set could not be computed (e.g. git diff failed)."""


class OutputFileError(OutlineSyncError):
    """The pipeline output file could not be written."""
