"""Core data models for turnero."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union


class Action(str, Enum):
    """What the bot does with a single inbound message."""

    SHOW_HELP = "show_help"
    LIST_SERVICES = "list_services"
    LIST_BOOKINGS = "list_bookings"
    CREATE_BOOKING = "create_booking"
    UNKNOWN = "unknown"


@dataclass
class Service:
    """A bookable service from the business catalog."""

    id: str
    name: str
    description: str = ""
    duration_minutes: int | None = None
    price: float | None = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class BookingInput:
    """Fields needed to create a booking."""

    name: str
    service: str
    date: str  # "2025-10-15"
    time: str  # "11:30"
    phone: str


@dataclass
class Booking:
    """A confirmed booking for one (service, date, time) slot."""

    id: str
    name: str
    service: str
    date: str
    time: str
    phone: str
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def slot(self) -> tuple[str, str, str]:
        return (self.service, self.date, self.time)


@dataclass
class IncomingMessage:
    """Channel-agnostic incoming message."""

    channel: str  # "telegram", "web"
    sender_id: str  # channel-specific user ID, also the fallback phone
    sender_name: str
    text: str
    is_group: bool = False
    from_me: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class OutgoingMessage:
    """Channel-agnostic outgoing message. Always plain text."""

    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class IntentResult:
    """Output of an intent classifier."""

    intent: str
    entities: dict[str, str] = field(default_factory=dict)
    fulfillment_text: str | None = None


@dataclass
class Route:
    """Router decision: the action plus its payload.

    payload is the command remainder (str) for typed commands, the entity
    map (dict) for classified intents, or the classifier's fulfillment text
    for UNKNOWN.
    """

    action: Action
    payload: Any = None


# --- Parsed booking requests ---


@dataclass(frozen=True)
class Complete:
    fields: BookingInput


@dataclass(frozen=True)
class MissingFields:
    missing: list[str]


@dataclass(frozen=True)
class MalformedFormat:
    reason: str


ParsedBookingRequest = Union[Complete, MissingFields, MalformedFormat]
