"""
Error Handling Module

Defines domain exceptions and error categories for the application.
Domain exceptions are pure and have no external dependencies.
Application exceptions translate them into user-facing messages and
HTTP status codes.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error category enumeration for structured error handling."""

    INVALID_REQUEST = "invalid_request"
    MISSING_FILE = "missing_file"
    FILE_TOO_LARGE = "file_too_large"
    FILE_NOT_FOUND = "file_not_found"
    METHOD_NOT_ALLOWED = "method_not_allowed"
    STORE_UNAVAILABLE = "store_unavailable"
    WRITE_FAILED = "write_failed"
    READ_FAILED = "read_failed"
    DECODE_FAILED = "decode_failed"
    DELETE_FAILED = "delete_failed"
    SYSTEM_ERROR = "system_error"


# User-facing messages. Never include driver output or stack traces here.
ERROR_MESSAGES: Dict[ErrorCategory, str] = {
    ErrorCategory.INVALID_REQUEST: "Bad request",
    ErrorCategory.MISSING_FILE: "File not found",
    ErrorCategory.FILE_TOO_LARGE: "File too large",
    ErrorCategory.FILE_NOT_FOUND: "File not found",
    ErrorCategory.METHOD_NOT_ALLOWED: "Method not allowed",
    ErrorCategory.STORE_UNAVAILABLE: "Storage unavailable",
    ErrorCategory.WRITE_FAILED: "Write error",
    ErrorCategory.READ_FAILED: "Download error",
    ErrorCategory.DECODE_FAILED: "Decode error",
    ErrorCategory.DELETE_FAILED: "Delete error",
    ErrorCategory.SYSTEM_ERROR: "Internal server error",
}

ERROR_STATUS_CODES: Dict[ErrorCategory, int] = {
    ErrorCategory.INVALID_REQUEST: 400,
    ErrorCategory.MISSING_FILE: 400,
    ErrorCategory.FILE_TOO_LARGE: 400,
    ErrorCategory.FILE_NOT_FOUND: 404,
    ErrorCategory.METHOD_NOT_ALLOWED: 405,
    ErrorCategory.STORE_UNAVAILABLE: 500,
    ErrorCategory.WRITE_FAILED: 500,
    ErrorCategory.READ_FAILED: 500,
    ErrorCategory.DECODE_FAILED: 500,
    ErrorCategory.DELETE_FAILED: 500,
    ErrorCategory.SYSTEM_ERROR: 500,
}


# ============================================================================
# Domain Exceptions (Pure - No External Dependencies)
# ============================================================================

class DomainError(Exception):
    """
    Base exception for all domain errors.

    Domain exceptions are pure and have no external dependencies.
    They can optionally wrap original errors for context.
    """

    category = ErrorCategory.SYSTEM_ERROR

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class InvalidUploadError(DomainError):
    """Raised when an upload request is malformed."""

    category = ErrorCategory.INVALID_REQUEST


class FileTooLargeError(DomainError):
    """
    Raised when an upload exceeds the configured maximum size.

    Raised before any store write when the declared size is already too
    large, or mid-copy when the stream turns out to be longer than declared.
    """

    category = ErrorCategory.FILE_TOO_LARGE

    def __init__(self, max_size: int, actual_size: Optional[int] = None):
        self.max_size = max_size
        self.actual_size = actual_size
        detail = f" (got {actual_size})" if actual_size is not None else ""
        super().__init__(f"Upload exceeds maximum size of {max_size} bytes{detail}")


class NotFoundError(DomainError):
    """Raised when an identifier, token or internal id has no live object."""

    category = ErrorCategory.FILE_NOT_FOUND


class StoreUnavailableError(DomainError):
    """Raised when the backing store cannot be reached or timed out."""

    category = ErrorCategory.STORE_UNAVAILABLE


class StoreWriteError(DomainError):
    """Raised on an I/O fault while streaming bytes into the store."""

    category = ErrorCategory.WRITE_FAILED


class StoreReadError(DomainError):
    """Raised on an I/O fault while streaming bytes out of the store."""

    category = ErrorCategory.READ_FAILED


class StoreDeleteError(DomainError):
    """Raised when the store fails to remove an object."""

    category = ErrorCategory.DELETE_FAILED


class MetadataDecodeError(DomainError):
    """Raised when a stored object's metadata does not have the expected shape."""

    category = ErrorCategory.DECODE_FAILED


class IdentifierGenerationError(DomainError):
    """Raised when the entropy source cannot supply random bytes."""

    category = ErrorCategory.SYSTEM_ERROR


class IdentifierCollisionError(DomainError):
    """Raised when every identifier draw collided with an existing object."""

    category = ErrorCategory.SYSTEM_ERROR


# ============================================================================
# Application Layer Exceptions
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP
    responses. The technical message is kept for logging only and is
    never serialized into a response body.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
            message: Overrides the default user-facing message for the category
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}
        self.message = message or ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.status_code = ERROR_STATUS_CODES.get(category, 500)

        super().__init__(self.message)

    @classmethod
    def from_domain_error(cls, error: DomainError) -> "ApplicationError":
        """Wrap a domain error, keeping its text as the technical message."""
        message = None
        if isinstance(error, FileTooLargeError):
            message = f"File too large (max {error.max_size // (1024 * 1024)} MB)"
        return cls(error.category, str(error), message=message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with the user-facing error message
        """
        return {"error": self.message}


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: Optional[int] = None,
    message: Optional[str] = None,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Logging is the caller's concern; this function only shapes the body.

    Args:
        category: Error category
        technical_message: Technical error details for logging
        context: Additional context information
        status_code: HTTP status code, defaults to the category's code
        message: Overrides the default user-facing message

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context, message=message)
    return error.to_dict(), status_code or error.status_code
