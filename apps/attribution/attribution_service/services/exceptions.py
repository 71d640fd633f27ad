"""Exceptions raised by the attribution services.

Both kinds abort the current run. The HTTP layer renders them as
``{"error": message}`` with status 500.
"""

from __future__ import annotations

from typing import Any


class AttributionError(Exception):
    """Base exception for all attribution errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details: dict[str, Any] = details or {}


class InvalidArgumentError(AttributionError, ValueError):
    """Raised when a run is requested with a missing or malformed argument."""


class DataAccessError(AttributionError):
    """Raised when a read or write against the store fails."""
