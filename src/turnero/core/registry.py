"""Booking registry: the only write path for bookings."""

from __future__ import annotations

import logging
import re
from dataclasses import replace
from datetime import datetime

from ..errors import InvalidInputError, NotFoundError
from ..models import Booking, BookingInput
from ..store import SlotStore

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "service", "date", "time", "phone")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def normalize_date(value: str) -> str:
    """Validate 'YYYY-MM-DD'. Raises ValueError."""
    value = value.strip()
    if not DATE_RE.match(value):
        raise ValueError(f"Invalid date: {value!r}")
    datetime.strptime(value, "%Y-%m-%d")
    return value


def normalize_time(value: str) -> str:
    """Validate 'H:mm' / 'HH:mm' and return zero-padded 'HH:mm'. Raises ValueError."""
    match = TIME_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid time: {value!r}")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time: {value!r}")
    return f"{hours:02d}:{minutes:02d}"


class BookingRegistry:
    """Conflict checking, creation, listing and deletion of bookings."""

    def __init__(self, store: SlotStore):
        self.store = store

    def is_slot_available(self, date: str, time: str, service: str) -> bool:
        """True iff no booking holds (service, date, time).

        Advisory only: create() re-checks inside the store's write path.
        """
        try:
            time = normalize_time(time)
        except ValueError:
            pass  # Unparseable times cannot match a stored booking anyway
        return self.store.find_booking(service.strip(), date.strip(), time) is None

    def _validate(self, data: BookingInput) -> BookingInput:
        trimmed = {name: (getattr(data, name) or "").strip() for name in REQUIRED_FIELDS}
        missing = [name for name, value in trimmed.items() if not value]
        if missing:
            raise InvalidInputError(
                f"Missing required fields: {', '.join(missing)}", fields=missing
            )

        try:
            trimmed["date"] = normalize_date(trimmed["date"])
        except ValueError:
            raise InvalidInputError("Date must be YYYY-MM-DD", fields=["date"]) from None
        try:
            trimmed["time"] = normalize_time(trimmed["time"])
        except ValueError:
            raise InvalidInputError("Time must be HH:mm", fields=["time"]) from None

        # The slot key uses the catalog spelling, so "barba" and "Barba" collide
        service = self.store.find_service_by_name(trimmed["service"])
        if service is None:
            raise InvalidInputError(
                f"Unknown service: {trimmed['service']}", fields=["service"]
            )
        trimmed["service"] = service.name

        return BookingInput(**trimmed)

    def create(self, data: BookingInput) -> Booking:
        """Create a booking. Raises InvalidInputError or ConflictError."""
        data = self._validate(data)
        booking = Booking(
            id="",
            name=data.name,
            service=data.service,
            date=data.date,
            time=data.time,
            phone=data.phone,
            created_at=datetime.now(),
        )
        booking.id = self.store.insert_booking(booking)
        logger.info(
            f"Created booking {booking.id}: {booking.service} {booking.date} {booking.time}"
        )
        return booking

    def list(self) -> list[Booking]:
        """All bookings ordered by (date, time), ties by id."""
        bookings = self.store.list_bookings()
        return sorted(bookings, key=lambda b: (b.date, b.time, b.id))

    def get(self, booking_id: str) -> Booking:
        booking = self.store.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking not found: {booking_id}")
        return booking

    def update(self, booking_id: str, data: BookingInput) -> Booking:
        """Replace a booking's fields. The slot is re-checked by the store."""
        current = self.get(booking_id)
        data = self._validate(data)
        updated = replace(
            current,
            name=data.name,
            service=data.service,
            date=data.date,
            time=data.time,
            phone=data.phone,
        )
        self.store.update_booking(updated)
        logger.info(f"Updated booking {booking_id}: {updated.service} {updated.date} {updated.time}")
        return updated

    def delete(self, booking_id: str) -> None:
        """Permanently remove a booking. Raises NotFoundError if absent."""
        self.store.delete_booking(booking_id)
        logger.info(f"Deleted booking {booking_id}")
