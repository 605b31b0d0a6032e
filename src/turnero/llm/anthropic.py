"""Anthropic (Claude) provider for intent classification."""

from __future__ import annotations

import os

from ..retry import retry_async
from .base import LLMProvider, LLMToolResponse, ToolCall


def _to_tool_response(response) -> LLMToolResponse:
    text = " ".join(b.text for b in response.content if b.type == "text")
    calls = [
        ToolCall(id=b.id, name=b.name, input=b.input or {})
        for b in response.content
        if b.type == "tool_use"
    ]
    return LLMToolResponse(text=text, tool_calls=calls, stop_reason=response.stop_reason or "")


class AnthropicProvider(LLMProvider):
    def __init__(self, model: str = "claude-haiku-4-5-20251001", api_key: str | None = None):
        self.model = model
        self.api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        self._client = None

    @property
    def client(self):
        if self._client is None:
            try:
                import anthropic
            except ImportError:
                raise ImportError(
                    "anthropic package not installed. Run: pip install turnero[anthropic]"
                )
            self._client = anthropic.Anthropic(api_key=self.api_key)
        return self._client

    async def chat_with_tools(
        self,
        system_prompt: str,
        messages: list[dict],
        tools: list[dict],
        force_tool: str | None = None,
    ) -> LLMToolResponse:
        kwargs = {}
        if force_tool:
            kwargs["tool_choice"] = {"type": "tool", "name": force_tool}

        response = await retry_async(
            self.client.messages.create,
            model=self.model,
            max_tokens=512,
            temperature=0,
            system=system_prompt,
            messages=messages,
            tools=tools,
            label="anthropic.classify",
            **kwargs,
        )
        return _to_tool_response(response)
