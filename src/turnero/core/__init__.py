"""Booking core: registry, suggester, router, intent filler and engine."""

from .availability import AvailabilitySuggester
from .engine import BookingEngine
from .filler import BookingIntentFiller
from .registry import BookingRegistry
from .router import ConversationRouter

__all__ = [
    "AvailabilitySuggester",
    "BookingEngine",
    "BookingIntentFiller",
    "BookingRegistry",
    "ConversationRouter",
]
