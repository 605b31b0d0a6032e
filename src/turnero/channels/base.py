"""Abstract base for channel adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Optional

from ..models import IncomingMessage, OutgoingMessage

MessageHandler = Callable[[IncomingMessage], Awaitable[Optional[OutgoingMessage]]]


class SessionState(str, Enum):
    """Lifecycle of a channel session: created -> ready -> stopped."""

    CREATED = "created"
    READY = "ready"
    STOPPED = "stopped"


class ChannelAdapter(ABC):
    """Base class for channel adapters (Telegram, Web).

    Each adapter owns exactly one transport session. The caller creates it,
    starts it, and stops it; there is no shared module-level client.
    """

    def __init__(self, config: dict, on_message: MessageHandler):
        self.config = config
        self.on_message = on_message
        self.state = SessionState.CREATED

    @property
    @abstractmethod
    def name(self) -> str:
        """Channel name identifier (e.g., 'telegram', 'web')."""
        ...

    async def start(self) -> None:
        if self.state == SessionState.READY:
            return
        if self.state == SessionState.STOPPED:
            raise RuntimeError(f"{self.name} session was disposed; create a new adapter")
        await self._start()
        self.state = SessionState.READY

    async def stop(self) -> None:
        if self.state != SessionState.READY:
            self.state = SessionState.STOPPED
            return
        try:
            await self._stop()
        finally:
            self.state = SessionState.STOPPED

    async def __aenter__(self) -> "ChannelAdapter":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    @abstractmethod
    async def _start(self) -> None:
        """Connect and begin delivering messages to on_message."""
        ...

    @abstractmethod
    async def _stop(self) -> None:
        """Graceful shutdown."""
        ...

    @abstractmethod
    async def send_message(self, sender_id: str, message: OutgoingMessage) -> None:
        """Send a message to a specific user."""
        ...
