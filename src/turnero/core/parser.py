"""Booking request parsing for command text and classifier entities."""

from __future__ import annotations

import re

from ..models import BookingInput, Complete, MalformedFormat, MissingFields, ParsedBookingRequest

COMMAND_TEMPLATE = "reservar Nombre|Servicio|YYYY-MM-DD|HH:mm|Telefono"

# Entity keys from the NLU agent, with English aliases
ENTITY_KEYS = {
    "date": ("fecha", "date"),
    "time": ("horario", "hora", "time"),
    "service": ("servicio", "service"),
    "name": ("nombre", "name"),
    "phone": ("telefono", "teléfono", "phone"),
}

ISO_DATETIME_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})T(\d{2}:\d{2})")


def parse_command(payload: str) -> ParsedBookingRequest:
    """Parse 'Name|Service|Date|Time|Phone'.

    Segments are trimmed and empty ones dropped; fewer than five is malformed.
    Extra segments are ignored.
    """
    parts = [segment.strip() for segment in payload.split("|")]
    parts = [segment for segment in parts if segment]

    if len(parts) < 5:
        return MalformedFormat(
            reason=f"expected 5 fields separated by '|', got {len(parts)}"
        )

    name, service, date, time, phone = parts[:5]
    return Complete(BookingInput(name=name, service=service, date=date, time=time, phone=phone))


def _entity(entities: dict, field_name: str) -> str:
    for key in ENTITY_KEYS[field_name]:
        value = entities.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def _date_part(value: str) -> str:
    match = ISO_DATETIME_RE.match(value)
    return match.group(1) if match else value


def _time_part(value: str) -> str:
    match = ISO_DATETIME_RE.match(value)
    return match.group(2) if match else value


def parse_entities(
    entities: dict,
    sender_id: str,
    default_name: str = "Cliente",
) -> ParsedBookingRequest:
    """Build a booking request from classifier entities.

    date, time and service are required. name falls back to default_name,
    phone to the sender's channel identifier.
    """
    date = _date_part(_entity(entities, "date"))
    time = _time_part(_entity(entities, "time"))
    service = _entity(entities, "service")

    missing = [
        name for name, value in (("date", date), ("time", time), ("service", service))
        if not value
    ]
    if missing:
        return MissingFields(missing=missing)

    return Complete(BookingInput(
        name=_entity(entities, "name") or default_name,
        service=service,
        date=date,
        time=time,
        phone=_entity(entities, "phone") or sender_id,
    ))
