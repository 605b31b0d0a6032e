"""Abstract base for LLM providers and their tool-call response types."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ToolCall:
    """A single tool invocation from the LLM."""

    id: str
    name: str
    input: dict[str, Any]


@dataclass
class LLMToolResponse:
    """Text plus any tool calls returned by the model."""

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)
    stop_reason: str = ""


class LLMProvider(ABC):
    """Base class for LLM backends used by the intent classifier."""

    @abstractmethod
    async def chat_with_tools(
        self,
        system_prompt: str,
        messages: list[dict],
        tools: list[dict[str, Any]],
        force_tool: str | None = None,
    ) -> LLMToolResponse:
        """Send one exchange with tool definitions.

        Args:
            system_prompt: System instructions for the model.
            messages: [{"role": "user"|"assistant", "content": "..."}].
            tools: Tool definitions in Anthropic format (input_schema).
            force_tool: Name of a tool the model must call, if any.

        Returns:
            The response text and any tool calls.
        """
        ...
