"""Chat completion client that can call MCP tools.

Uses the OpenAI-compatible Chat Completions API, so it works with OpenAI as
well as llama.cpp, vLLM, Ollama and similar servers.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

try:
    # Lazy import so the package is optional until installed
    from openai import AsyncOpenAI as _AsyncOpenAI
except Exception:  # pragma: no cover - handled at runtime
    _AsyncOpenAI = None  # type: ignore

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Use the available tools to look up current "
    "documentation before answering questions about libraries and APIs."
)


def convert_tools(tools: Mapping[str, Any] | None) -> list[dict]:
    """Convert a tools mapping to Chat Completion function tools."""
    converted: list[dict] = []
    if not tools:
        return converted
    for name, tool in tools.items():
        definition = tool.definition
        converted.append(
            {
                "type": "function",
                "function": {
                    "name": name,
                    "description": definition["description"],
                    "parameters": definition["input_schema"],
                },
            }
        )
    return converted


def _tool_result_text(result: str | list[dict]) -> str:
    """Flatten MCP content blocks into tool message text."""
    if not isinstance(result, list):
        return str(result)
    parts = []
    for block in result:
        if block.get("type") == "text":
            parts.append(block.get("text", ""))
        elif block.get("type") == "image":
            parts.append("[Image]")
    return "\n".join(parts)


class CompletionClient:
    """OpenAI-compatible completion client with a tool-calling loop.

    Reads ``config["providers"]["openai"]``: ``base_url``, ``key`` (falls back
    to OPENAI_API_KEY), ``model``, ``max_tokens`` and ``max_steps``.
    """

    def __init__(self, config: dict[str, Any]):
        providers = config.get("providers", {}) if isinstance(config, dict) else {}
        self.config: dict[str, Any] = providers.get("openai", {})

        if _AsyncOpenAI is None:
            raise RuntimeError(
                "The 'openai' package is not installed. Run 'pip install openai' to install it."
            )

        base_url = self.config.get("base_url", "https://api.openai.com/v1")
        api_key = self.config.get("key") or os.environ.get("OPENAI_API_KEY", "not-needed")
        self.model: str = self.config.get("model", "gpt-4o-mini")
        self.max_steps: int = int(self.config.get("max_steps", 5))

        self._client = _AsyncOpenAI(api_key=api_key, base_url=base_url)
        logger.info(f"Completion client initialized with base_url: {base_url}")

    async def _call(self, messages: list[dict], tools: list[dict]) -> dict:
        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
        }
        max_tokens = self.config.get("max_tokens", 2048)
        if max_tokens:
            request_params["max_tokens"] = max_tokens
        if tools:
            request_params["tools"] = tools
            logger.debug(f"Adding {len(tools)} tools to completion request")

        logger.debug(f"Calling completion API with {len(messages)} messages")
        response = await self._client.chat.completions.create(**request_params)
        return response.model_dump()

    async def _run_tool(self, tools: Mapping[str, Any], name: str, arguments: str) -> str:
        tool = tools.get(name)
        if tool is None:
            return f"Error: unknown tool '{name}'"

        try:
            kwargs = json.loads(arguments) if arguments else {}
        except json.JSONDecodeError:
            logger.warning(f"Failed to parse tool arguments: {arguments}")
            return f"Error: invalid JSON arguments for tool '{name}'"

        try:
            result = await tool.execute(**kwargs)
        except Exception as e:
            logger.warning(f"Tool '{name}' failed: {e}")
            return f"Error: {e}"
        return _tool_result_text(result)

    async def generate_text(
        self,
        prompt: str,
        tools: Mapping[str, Any] | None = None,
        system_prompt: str | None = None,
    ) -> str:
        """Answer ``prompt``, calling tools until the model returns text.

        Stops after ``max_steps`` model calls and returns whatever text the
        last response carried.
        """
        tools = tools or {}
        converted = convert_tools(tools)
        messages: list[dict] = [
            {"role": "system", "content": system_prompt or DEFAULT_SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]

        text = ""
        for step in range(self.max_steps):
            response = await self._call(messages, converted)
            if not response.get("choices"):
                return ""

            message = response["choices"][0].get("message", {})
            text = message.get("content") or ""
            tool_calls = message.get("tool_calls") or []
            if not tool_calls:
                return text

            messages.append(
                {"role": "assistant", "content": message.get("content"), "tool_calls": tool_calls}
            )
            for tc in tool_calls:
                function = tc.get("function", {})
                name = function.get("name", "")
                logger.info(f"Step {step + 1}: calling tool '{name}'")
                content = await self._run_tool(tools, name, function.get("arguments", "{}"))
                messages.append({"role": "tool", "tool_call_id": tc.get("id", ""), "content": content})

        logger.warning(f"Stopped after {self.max_steps} steps without a final answer")
        return text
