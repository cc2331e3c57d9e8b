"""Shared exceptions for the chat API.

Every error carries an ``error_code`` used both to pick the HTTP status and
to look up the localized message returned to the caller.
"""
from typing import Any, Dict, Optional


class ChatServiceException(Exception):
    """Base exception for the chat API."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ChatServiceException):
    """Raised when input validation fails."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "VALIDATION_ERROR", details)


class NotFoundError(ChatServiceException):
    """Raised when a resource is not found."""

    status_code = 404

    def __init__(self, resource: str, identifier: str, error_code: str = "NOT_FOUND"):
        message = f"{resource} with identifier '{identifier}' not found"
        super().__init__(message, error_code, {"resource": resource, "identifier": identifier})


class StorageError(ChatServiceException):
    """Raised when database operations fail.

    The message is internal only; callers receive the localized text for
    ``STORAGE_ERROR``.
    """

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "STORAGE_ERROR", details)


class UpstreamError(ChatServiceException):
    """Raised when the completion API call fails or returns an unusable body."""

    status_code = 502

    def __init__(self, service: str, message: str, details: Optional[Dict[str, Any]] = None):
        full_message = f"{service} service error: {message}"
        error_details = {"service": service}
        if details:
            error_details.update(details)
        super().__init__(full_message, "UPSTREAM_ERROR", error_details)
