"""Custom exceptions for the outfitter contract service."""

from __future__ import annotations

from typing import Any


class OutfitterError(Exception):
    """Base exception for the application.

    ``code`` is the stable machine-readable identifier surfaced in API error
    bodies; ``details`` carries the values involved (dates, day counts,
    statuses) so callers can render a precise message.
    """

    code = "error"
    http_status = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(OutfitterError):
    """Raised when input fails a business rule."""

    code = "validation_error"
    http_status = 422


class NotFoundError(OutfitterError):
    """Raised when a resource is not found."""

    code = "not_found"
    http_status = 404


class ConflictError(OutfitterError):
    """Raised when an operation is not allowed in the resource's current state."""

    code = "conflict"
    http_status = 409


class AuthenticationError(OutfitterError):
    """Raised when authentication fails."""

    code = "authentication_error"
    http_status = 401


class AuthorizationError(OutfitterError):
    """Raised when the caller lacks a required scope."""

    code = "authorization_error"
    http_status = 403


class OwnershipError(AuthorizationError):
    """Raised when the caller is not the client a record is assigned to."""

    code = "ownership_error"


class ConfigurationError(OutfitterError):
    """Raised when configuration is invalid."""

    code = "configuration_error"
    http_status = 500
