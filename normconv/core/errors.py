from __future__ import annotations

"""Domain-specific exception hierarchy for the norm conversion service."""

from typing import Any

__all__ = [
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "BandNotFoundError",
    "ConfigurationError",
    "NormTableError",
]


class DomainError(Exception):
    """Base class for recoverable domain-level errors."""

    status_code: int = 400
    error_code: str = "domain_error"
    default_message: str = "Domain error"

    def __init__(
        self,
        message: str | None = None,
        *,
        detail: Any | None = None,
        status_code: int | None = None,
    ) -> None:
        final_message = message or self.default_message
        super().__init__(final_message)
        self.message = final_message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class ValidationError(DomainError, ValueError):
    """Raised when caller-provided data fails validation."""

    error_code = "validation_error"
    default_message = "Invalid data"
    status_code = 400


class NotFoundError(DomainError):
    """Base class for missing domain resources."""

    error_code = "not_found"
    status_code = 404
    default_message = "Resource not found"


class BandNotFoundError(NotFoundError):
    """Raised when a normative band id is not loaded."""

    error_code = "band_not_found"
    default_message = "Normative band not found"


class ConfigurationError(DomainError):
    """Raised when server-side configuration is invalid or incomplete."""

    error_code = "configuration_error"
    status_code = 500
    default_message = "Invalid system configuration"


class NormTableError(ConfigurationError):
    """Raised when a norm table file cannot be read or has the wrong shape."""

    error_code = "norm_table_error"
    default_message = "Norm table could not be loaded"
