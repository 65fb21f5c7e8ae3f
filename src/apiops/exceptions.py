"""Exception hierarchy for apiops.

All exceptions inherit from :class:`ApiopsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apiops.exit_codes`.
The top-level error handler in :func:`apiops.app.main` catches
``ApiopsError`` and exits with the appropriate code, while unexpected
exceptions exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ApiopsError (exit 1)
    +-- ConfigError             (exit 1)
    +-- InvalidNameError        (exit 10)
    +-- DecodeError             (exit 7)
    +-- UnsupportedFormatError  (exit 8)
    +-- StorageError            (exit 9)
    +-- ProviderError           (exit 5)
    |   +-- AuthError           (exit 3)
    |   +-- NotFoundError       (exit 4)
    |   +-- ServerError         (exit 5)
    |   +-- ConnectionError_    (exit 6)
    +-- ExtractionCancelled     (exit 130)
    +-- ExtractionError         (exit code of its cause)
"""

from __future__ import annotations

from typing import Optional

from apiops.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CANCELLED,
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_NOT_FOUND,
    EXIT_PROVIDER_ERROR,
    EXIT_STORAGE_ERROR,
    EXIT_UNSUPPORTED_FORMAT,
    EXIT_VALIDATION_ERROR,
)


class ApiopsError(Exception):
    """Base exception for all apiops errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apiops.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(ApiopsError):
    """Raised for configuration problems (missing values, invalid YAML)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidNameError(ApiopsError, ValueError):
    """Raised when a resource name is empty or whitespace-only."""

    exit_code = EXIT_VALIDATION_ERROR


class DecodeError(ApiopsError):
    """Raised when a document field is present but malformed.

    Args:
        field: Dotted path of the offending field (``contact.url``,
            ``protocols[1]``).
        reason: What was wrong with the value.
    """

    exit_code = EXIT_DECODE_ERROR

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        if field:
            super().__init__(f"Invalid value for '{field}': {reason}")
        else:
            super().__init__(f"Invalid document: {reason}")

    def within(self, parent: str) -> DecodeError:
        """Return a copy of this error with *parent* prefixed to the field path."""
        if not self.field:
            return DecodeError(parent, self.reason)
        if self.field.startswith("["):
            return DecodeError(f"{parent}{self.field}", self.reason)
        return DecodeError(f"{parent}.{self.field}", self.reason)


class UnsupportedFormatError(ApiopsError):
    """Raised when an API specification format has no file-naming rule."""

    exit_code = EXIT_UNSUPPORTED_FORMAT


class StorageError(ApiopsError):
    """Raised when the artifact tree cannot be read or written."""

    exit_code = EXIT_STORAGE_ERROR


class ProviderError(ApiopsError):
    """Raised for any failure surfaced by the resource provider."""

    exit_code = EXIT_PROVIDER_ERROR


class AuthError(ProviderError):
    """Raised when the provider returns HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ProviderError):
    """Raised when the provider returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(ProviderError):
    """Raised for HTTP 5xx, throttling, and other unexpected provider statuses."""

    exit_code = EXIT_PROVIDER_ERROR


class ConnectionError_(ProviderError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ExtractionCancelled(ApiopsError):
    """Raised when a cancellation signal aborts in-flight extraction work."""

    exit_code = EXIT_CANCELLED

    def __init__(self, message: str = "Extraction was cancelled."):
        super().__init__(message)


class ExtractionError(ApiopsError):
    """Raised when one resource could not be extracted.

    Wraps the underlying failure and keeps its exit code, so a decode
    failure still exits with :data:`~apiops.exit_codes.EXIT_DECODE_ERROR`.

    Args:
        kind: Resource kind being extracted (e.g. ``"api"``).
        name: Name of the resource that failed.
        cause: The underlying exception.
    """

    def __init__(self, kind: str, name: str, cause: Exception):
        self.kind = kind
        self.name = name
        self.cause = cause
        exit_code: Optional[int] = getattr(cause, "exit_code", None)
        super().__init__(f"Failed to extract {kind} '{name}': {cause}", exit_code=exit_code)
