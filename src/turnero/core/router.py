"""Stateless dispatch of one inbound chat message to a booking action."""

from __future__ import annotations

import re

from ..models import Action, IncomingMessage, IntentResult, Route

GREETINGS = ("hola", "hello", "buenas")
HELP_WORDS = {"menu", "help", "ayuda"}
RESERVE_COMMAND = "reservar"
RESERVE_SEPARATOR_RE = re.compile(r"^[:\s-]+")

INTENT_ACTIONS = {
    "agendar_turno": Action.CREATE_BOOKING,
    "consultar_servicios": Action.LIST_SERVICES,
    "consultar_turnos": Action.LIST_BOOKINGS,
    "ayuda": Action.SHOW_HELP,
    "saludo": Action.SHOW_HELP,
}


class ConversationRouter:
    """Maps message text, or a classified intent, to an Action.

    Holds no state between messages and never raises.
    """

    @staticmethod
    def accepts(msg: IncomingMessage) -> bool:
        """False for the bot's own messages, group chats and blank bodies."""
        if msg.from_me or msg.is_group:
            return False
        return bool((msg.text or "").strip())

    def route(self, text: str) -> Route:
        text = (text or "").strip()
        normalized = text.lower()

        if normalized.startswith(GREETINGS) or normalized in HELP_WORDS:
            return Route(Action.SHOW_HELP)

        if normalized == "servicios":
            return Route(Action.LIST_SERVICES)

        if normalized == "turnos":
            return Route(Action.LIST_BOOKINGS)

        if normalized.startswith(RESERVE_COMMAND):
            payload = RESERVE_SEPARATOR_RE.sub("", text[len(RESERVE_COMMAND):]).strip()
            return Route(Action.CREATE_BOOKING, payload)

        return Route(Action.UNKNOWN)

    def route_intent(self, intent: IntentResult) -> Route:
        action = INTENT_ACTIONS.get((intent.intent or "").strip().lower(), Action.UNKNOWN)
        if action == Action.CREATE_BOOKING:
            return Route(action, dict(intent.entities or {}))
        if action == Action.UNKNOWN:
            return Route(action, intent.fulfillment_text)
        return Route(action)
