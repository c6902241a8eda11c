"""Library exceptions."""

from __future__ import annotations

from collections.abc import Iterable


class PyFacilityDirectoryError(Exception):
    """Base exception for the library."""

    error_type = "unknown"
    default_error_code: str | None = None
    default_user_message: str | None = None

    def __init__(
        self,
        message: str | None = None,
        *,
        error_code: str | None = None,
        detail: str | None = None,
        user_message: str | None = None,
    ) -> None:
        text = message if message is not None else detail
        super().__init__(text or "")
        self.error_code = error_code if error_code is not None else self.default_error_code
        self.detail = detail if detail is not None else text
        self.user_message = (
            user_message if user_message is not None else self.default_user_message
        )


class ValidationError(PyFacilityDirectoryError):
    """Raised when a write payload fails validation."""

    error_type = "validation"
    default_error_code = "validation_error"

    def __init__(
        self,
        message: str | None = None,
        *,
        errors: Iterable[str] = (),
        **kwargs,
    ) -> None:
        self.errors = tuple(errors)
        if message is None:
            message = "; ".join(self.errors) or "Validation failed."
        kwargs.setdefault("user_message", "\n".join(self.errors) or None)
        super().__init__(message, **kwargs)


class RateLimitError(PyFacilityDirectoryError):
    """Raised when the device is still inside its submission cooldown."""

    error_type = "rate_limit"
    default_error_code = "rate_limit"

    def __init__(
        self,
        message: str | None = None,
        *,
        remaining_seconds: int = 0,
        **kwargs,
    ) -> None:
        self.remaining_seconds = remaining_seconds
        if message is None:
            message = f"Rate limit exceeded; retry in {remaining_seconds} seconds."
        kwargs.setdefault(
            "user_message",
            f"Please wait {remaining_seconds} seconds before submitting again.",
        )
        super().__init__(message, **kwargs)


class CircuitOpenError(PyFacilityDirectoryError):
    """Raised when a circuit breaker rejects a call without running it."""

    error_type = "circuit_open"
    default_error_code = "circuit_open"
    default_user_message = "Submission failed. Please try again later."


class NetworkError(PyFacilityDirectoryError):
    """Raised when network communication fails transiently."""

    error_type = "network"
    default_error_code = "network_request_failed"
    default_user_message = "Submission failed. Please try again later."


class TimeoutError(PyFacilityDirectoryError):  # noqa: A001
    """Raised when an operation misses its deadline."""

    error_type = "timeout"
    default_error_code = "deadline_exceeded"
    default_user_message = "Submission failed. Please try again later."


class NotFoundError(PyFacilityDirectoryError):
    """Raised when the referenced document does not exist."""

    error_type = "not_found"
    default_error_code = "not_found"
    default_user_message = "This location could not be found."


class PersistenceError(PyFacilityDirectoryError):
    """Raised when the persistence backend rejects a write."""

    error_type = "persistence"
    default_error_code = "persistence_error"
    default_user_message = "Submission failed. Please try again later."


class StorageError(PyFacilityDirectoryError):
    """Raised when the local key-value store fails."""

    error_type = "storage"
    default_error_code = "storage_error"
    default_user_message = "Submission failed. Please try again later."
