"""OpenAI LLM provider."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from ..retry import retry_async
from .base import LLMProvider, LLMToolResponse, ToolCall

logger = logging.getLogger(__name__)


def anthropic_tools_to_openai(tools: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Convert {"name", "description", "input_schema"} tool definitions to
    OpenAI's {"type": "function", "function": {..., "parameters"}} format.
    """
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool.get("description", ""),
                "parameters": tool.get("input_schema", {"type": "object", "properties": {}}),
            },
        }
        for tool in tools
    ]


class OpenAIProvider(LLMProvider):
    """OpenAI API integration with function calling."""

    def __init__(self, model: str = "gpt-4o-mini", api_key: str | None = None):
        self.model = model
        self.api_key = api_key or os.environ.get("OPENAI_API_KEY")
        self._client = None

    @property
    def client(self):
        if not self._client:
            try:
                import openai
            except ImportError:
                raise ImportError(
                    "openai package not installed. Run: pip install turnero[openai]"
                )
            self._client = openai.OpenAI(api_key=self.api_key)
        return self._client

    async def chat_with_tools(
        self,
        system_prompt: str,
        messages: list[dict],
        tools: list[dict[str, Any]],
        force_tool: str | None = None,
    ) -> LLMToolResponse:
        openai_messages = [{"role": "system", "content": system_prompt}] + [
            {"role": m["role"], "content": m["content"]} for m in messages
        ]
        kwargs = {}
        if force_tool:
            kwargs["tool_choice"] = {"type": "function", "function": {"name": force_tool}}

        response = await retry_async(
            self.client.chat.completions.create,
            model=self.model,
            messages=openai_messages,
            tools=anthropic_tools_to_openai(tools),
            max_tokens=512,
            temperature=0,
            label="openai.classify",
            **kwargs,
        )

        message = response.choices[0].message
        tool_calls = []
        for tc in message.tool_calls or []:
            try:
                arguments = json.loads(tc.function.arguments)
            except (json.JSONDecodeError, TypeError):
                logger.warning(f"Unparseable tool arguments from {tc.function.name}")
                arguments = {}
            tool_calls.append(ToolCall(id=tc.id, name=tc.function.name, input=arguments))

        return LLMToolResponse(
            text=message.content or "",
            tool_calls=tool_calls,
            stop_reason="tool_use" if tool_calls else "end_turn",
        )
