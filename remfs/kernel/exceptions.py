"""Core exception hierarchy for remfs.

All remfs exceptions inherit from RemFSError so callers can catch every
client failure with one clause. The overlay raises the store-facing kinds
(NotFoundError, TypeConflictError, InvalidTypeError) and the drivers raise the
transport-facing kinds (RemoteUnavailableError, InvalidResponseError).
"""

from __future__ import annotations

# ============================================================================
# Base Exception
# ============================================================================


class RemFSError(Exception):
    """Base exception for all remfs errors."""

    pass


# ============================================================================
# Configuration & Validation Errors
# ============================================================================


class ConfigurationError(RemFSError):
    """Raised when configuration is invalid or missing.

    Examples
    --------
    Example usage::

        raise ConfigurationError("client", "base_url is empty")
    """

    def __init__(self, component: str, reason: str) -> None:
        super().__init__(f"Configuration error in '{component}': {reason}")
        self.component = component
        self.reason = reason


class ValidationError(RemFSError):
    """Raised when an argument or client state fails validation."""

    def __init__(self, field: str, constraint: str, value: object = None) -> None:
        """Initialize validation error.

        Args
        ----
            field: Name of the field that failed validation
            constraint: Description of the validation constraint
            value: The invalid value (optional)
        """
        if value is not None:
            msg = f"Validation failed for '{field}': {constraint} (got {value!r})"
        else:
            msg = f"Validation failed for '{field}': {constraint}"
        super().__init__(msg)
        self.field = field
        self.constraint = constraint
        self.value = value


# ============================================================================
# Store Errors
# ============================================================================


class NotFoundError(RemFSError):
    """Raised when a path or id cannot be resolved.

    Examples
    --------
    Example usage::

        raise NotFoundError("path", "/docs/missing.txt")
    """

    def __init__(self, kind: str, target: str) -> None:
        super().__init__(f"{kind.title()} '{target}' not found")
        self.kind = kind
        self.target = target


class AlreadyExistsError(RemFSError):
    """Raised when creating a path that is already mapped."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Path '{path}' already exists")
        self.path = path


class TypeConflictError(RemFSError):
    """Raised when a record is a folder where a file is expected, or vice versa.

    Also raised when an ancestor segment of a path being created is
    occupied by a file.
    """

    def __init__(self, path: str, expected: str, actual: str) -> None:
        super().__init__(f"Type conflict at '{path}': expected {expected}, got {actual}")
        self.path = path
        self.expected = expected
        self.actual = actual


class InvalidTypeError(RemFSError):
    """Raised when a cached field has an unexpected shape."""

    def __init__(self, field: str, expected: str, value: object = None) -> None:
        super().__init__(
            f"Field '{field}' has unexpected shape: expected {expected}, "
            f"got {type(value).__name__}"
        )
        self.field = field
        self.expected = expected
        self.value = value


# ============================================================================
# Driver Errors
# ============================================================================


class RemoteUnavailableError(RemFSError):
    """Raised when a remote operation fails in transport, times out or is refused.

    Attributes
    ----------
    operation : str
        The remote operation that failed ("fetch_index", "fetch_records",
        "apply_patches").
    status_code : int | None
        The HTTP status code, when the remote answered.
    """

    def __init__(self, operation: str, reason: str, status_code: int | None = None) -> None:
        self.operation = operation
        self.reason = reason
        self.status_code = status_code
        super().__init__(f"Remote operation '{operation}' failed: {reason}")


class InvalidResponseError(RemFSError):
    """Raised when a remote operation returns a malformed payload."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"Invalid response from '{operation}': {reason}")


class HttpClientError(RemFSError):
    """Raised by the HTTP driver when a request fails with a non-2xx status code.

    Attributes
    ----------
    status_code : int
        The HTTP status code.
    body : Any
        The response body.
    """

    def __init__(self, status_code: int, body: object, message: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"HTTP {status_code}")


__all__ = [
    # Base
    "RemFSError",
    # Configuration & Validation
    "ConfigurationError",
    "ValidationError",
    # Store
    "NotFoundError",
    "AlreadyExistsError",
    "TypeConflictError",
    "InvalidTypeError",
    # Drivers
    "RemoteUnavailableError",
    "InvalidResponseError",
    "HttpClientError",
]
