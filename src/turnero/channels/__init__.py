"""Chat transport adapters."""

from .base import ChannelAdapter, SessionState

__all__ = ["ChannelAdapter", "SessionState"]
