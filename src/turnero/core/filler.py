"""Turns a parsed booking request into a booking and a reply text."""

from __future__ import annotations

import logging
from dataclasses import replace

from ..errors import ConflictError, InvalidInputError
from ..models import BookingInput, Complete, MalformedFormat, MissingFields, ParsedBookingRequest
from ..store import SlotStore
from . import replies
from .availability import AvailabilitySuggester
from .registry import BookingRegistry, normalize_time

logger = logging.getLogger(__name__)


class BookingIntentFiller:
    """Resolves the service, checks the slot and creates the booking.

    Every outcome of a parsed request is a reply string.
    """

    def __init__(
        self,
        store: SlotStore,
        registry: BookingRegistry,
        suggester: AvailabilitySuggester,
    ):
        self.store = store
        self.registry = registry
        self.suggester = suggester

    def fill(self, parsed: ParsedBookingRequest) -> str:
        if isinstance(parsed, MalformedFormat):
            logger.info(f"Malformed booking command: {parsed.reason}")
            return replies.INVALID_FORMAT
        if isinstance(parsed, MissingFields):
            logger.info(f"Booking request missing fields: {', '.join(parsed.missing)}")
            return replies.MISSING_FIELDS
        if isinstance(parsed, Complete):
            return self._book(parsed.fields)
        raise TypeError(f"Unexpected booking request: {parsed!r}")

    def _book(self, fields: BookingInput) -> str:
        try:
            service = self.store.find_service_by_name(fields.service)
            if service is None:
                return replies.SERVICE_NOT_FOUND
            fields = replace(fields, service=service.name)

            try:
                fields = replace(fields, time=normalize_time(fields.time))
            except ValueError:
                return replies.invalid_fields(["time"])

            if not self.registry.is_slot_available(fields.date, fields.time, fields.service):
                return self._suggest(fields.date, fields.service, fields.time)

            try:
                booking = self.registry.create(fields)
            except ConflictError:
                # Lost the race between the availability check and the write
                logger.info(
                    f"Slot taken at write time: {fields.service} {fields.date} {fields.time}"
                )
                return self._suggest(fields.date, fields.service, fields.time)

            return replies.booking_confirmed(booking)

        except InvalidInputError as e:
            return replies.invalid_fields(e.fields)
        except Exception:
            logger.exception("Failed to create booking from chat")
            return replies.BOOKING_FAILED

    def _suggest(self, date: str, service: str, time: str) -> str:
        suggestions = self.suggester.suggest_slots(date, service, near=time)
        return replies.slot_taken(suggestions)
