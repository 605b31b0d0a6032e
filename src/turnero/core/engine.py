"""Booking engine: channel-agnostic entry point for inbound chat messages."""

from __future__ import annotations

import logging

from ..config import Config
from ..llm.classifier import IntentClassifier
from ..models import Action, IncomingMessage, OutgoingMessage, Route
from ..store import SlotStore
from . import replies
from .availability import AvailabilitySuggester
from .filler import BookingIntentFiller
from .parser import parse_command, parse_entities
from .registry import BookingRegistry
from .router import ConversationRouter

logger = logging.getLogger(__name__)


class BookingEngine:
    """Processes one message at a time and produces a plain-text reply.

    Typed commands are routed first; anything unrecognized goes through the
    optional intent classifier. Group messages, the bot's own messages and
    blank bodies get no reply. No exception reaches the channel adapter.
    """

    def __init__(
        self,
        config: Config,
        store: SlotStore,
        classifier: IntentClassifier | None = None,
    ):
        self.config = config
        self.store = store
        self.classifier = classifier
        self.registry = BookingRegistry(store)
        self.suggester = AvailabilitySuggester(config.slots, self.registry)
        self.router = ConversationRouter()
        self.filler = BookingIntentFiller(store, self.registry, self.suggester)

    async def handle_message(self, msg: IncomingMessage) -> OutgoingMessage | None:
        if not self.router.accepts(msg):
            return None

        text = msg.text.strip()
        logger.info(f"Incoming message from {msg.channel}:{msg.sender_id}: {text[:80]}")

        route = self.router.route(text)
        from_classifier = False
        if route.action == Action.UNKNOWN and self.classifier is not None:
            classified = await self._classify(text)
            if classified is not None:
                route, from_classifier = classified, True

        try:
            reply = self._dispatch(route, msg, from_classifier)
        except Exception:
            logger.exception(f"Unhandled error processing message from {msg.sender_id}")
            if route.action == Action.CREATE_BOOKING:
                reply = replies.BOOKING_FAILED
            else:
                reply = replies.UNKNOWN_COMMAND

        return OutgoingMessage(text=reply, metadata={"action": route.action.value})

    async def _classify(self, text: str) -> Route | None:
        try:
            intent = await self.classifier.classify(text)
        except Exception as e:
            logger.warning(f"Intent classifier failed, using command fallback: {e}")
            return None
        logger.info(f"Classified intent: {intent.intent}")
        return self.router.route_intent(intent)

    def _dispatch(self, route: Route, msg: IncomingMessage, from_classifier: bool) -> str:
        if route.action == Action.SHOW_HELP:
            return replies.HELP_MESSAGE

        if route.action == Action.LIST_SERVICES:
            return self._list_services()

        if route.action == Action.LIST_BOOKINGS:
            return self._list_bookings()

        if route.action == Action.CREATE_BOOKING:
            if isinstance(route.payload, dict):
                parsed = parse_entities(
                    route.payload,
                    sender_id=msg.sender_id,
                    default_name=self.config.business.default_customer_name,
                )
            else:
                parsed = parse_command(route.payload or "")
            return self.filler.fill(parsed)

        if from_classifier:
            return route.payload or replies.UNKNOWN_INTENT
        return replies.UNKNOWN_COMMAND

    def _list_services(self) -> str:
        try:
            return replies.format_services(self.store.list_services())
        except Exception:
            logger.exception("Could not list services for chat")
            return replies.SERVICES_UNAVAILABLE

    def _list_bookings(self) -> str:
        try:
            return replies.format_bookings(self.registry.list())
        except Exception:
            logger.exception("Could not list bookings for chat")
            return replies.BOOKINGS_UNAVAILABLE
