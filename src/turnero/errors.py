"""Booking error taxonomy shared by the registry, store and chat layer."""

from __future__ import annotations


class BookingError(Exception):
    """Base exception for booking errors."""


class InvalidInputError(BookingError):
    """A required field is missing or malformed."""

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class ConflictError(BookingError):
    """The requested (service, date, time) slot is already taken."""


class NotFoundError(BookingError):
    """The booking or service does not exist."""


class StoreUnavailableError(BookingError):
    """The backing store failed; not recoverable locally."""
