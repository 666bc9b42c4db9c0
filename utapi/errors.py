"""Exception taxonomy for utapi."""
from typing import Any, Dict, Optional


class UploadthingError(Exception):
    """Base class for all utapi errors."""


class ConfigError(UploadthingError):
    """Raised when client configuration is missing or invalid."""


class UploadthingAPIError(UploadthingError):
    """Non-2xx response to a JSON API call."""

    def __init__(self, message: str, status_code: int, body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class BatchTicketError(UploadthingError):
    """
    The ticket request for a whole batch failed.

    No file of the batch was transferred. The outbound payload is kept
    for diagnostics.
    """

    def __init__(self, message: str, payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.payload = payload


class TransferError(UploadthingError):
    """Pushing one file's bytes to its destination failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class TicketFieldError(TransferError, ValueError):
    """A ticket form field is not a string; raised before anything is sent."""


class PollTransportError(UploadthingError):
    """A single poll attempt could not be completed or parsed."""


class UploadCancelled(UploadthingError):
    """The cancellation signal fired while an operation was in flight."""
