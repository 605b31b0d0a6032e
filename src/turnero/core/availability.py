"""Availability suggester: free alternatives on a fixed daily slot grid."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..config import SlotsConfig
from ..errors import BookingError
from .registry import BookingRegistry, normalize_date, normalize_time

logger = logging.getLogger(__name__)


def parse_hhmm(value: str) -> tuple[int, int]:
    """Parse 'HH:MM' into (hours, minutes)."""
    hours, minutes = normalize_time(value).split(":")
    return int(hours), int(minutes)


def _minutes(value: str) -> int:
    hours, minutes = parse_hhmm(value)
    return hours * 60 + minutes


class AvailabilitySuggester:
    """Proposes alternative times for a (date, service) that collided.

    Candidates come from a daily grid between opening_time (inclusive) and
    closing_time (exclusive) every step_minutes. Each candidate is checked
    against the registry, so an occupied slot is never suggested.
    """

    def __init__(self, config: SlotsConfig, registry: BookingRegistry):
        self.config = config
        self.registry = registry

    def daily_grid(self, date: str) -> list[str]:
        """All grid times for a date, ascending. Empty for an invalid date."""
        try:
            day = datetime.strptime(normalize_date(date), "%Y-%m-%d")
        except ValueError:
            return []

        (oh, om), (ch, cm) = parse_hhmm(self.config.opening_time), parse_hhmm(self.config.closing_time)
        step = timedelta(minutes=self.config.step_minutes)
        current = day.replace(hour=oh, minute=om)
        closing = day.replace(hour=ch, minute=cm)

        grid = []
        while current < closing:
            grid.append(current.strftime("%H:%M"))
            current += step
        return grid

    def suggest_slots(self, date: str, service: str, near: str | None = None) -> list[str]:
        """Free grid times for (date, service), ascending. Never raises."""
        try:
            near_time = normalize_time(near) if near else None
        except ValueError:
            near_time = None

        try:
            free = [
                candidate
                for candidate in self.daily_grid(date)
                if candidate != near_time
                and self.registry.is_slot_available(date, candidate, service)
            ]
        except (BookingError, ValueError) as e:
            logger.error(f"Could not compute suggestions for {service} on {date}: {e}")
            return []

        if near_time:
            target = _minutes(near_time)
            # Closest first; earlier time wins a tie
            free.sort(key=lambda t: (abs(_minutes(t) - target), _minutes(t)))

        return sorted(free[: max(self.config.max_suggestions, 0)])
