"""
Anthropic Provider
==================

Adapter for Anthropic's Messages API.

The Messages API differs from the canonical shape in a few ways:
    - System prompts are a separate ``system`` parameter, not a message
    - ``max_tokens`` is mandatory
    - A tool call is a ``tool_use`` content block with native JSON input
    - A tool result is a user message holding a ``tool_result`` block that
      references the ``tool_use`` id

This adapter hides those differences behind ``BaseProvider``.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any, AsyncIterator, Optional, Union

import anthropic
import httpx
from anthropic import AsyncAnthropic

from conclave.models import FunctionCall, Message, Role
from conclave.providers.base import BaseProvider, decode_arguments, serialize_result

logger = logging.getLogger(__name__)


def _new_tool_use_id() -> str:
    return f"toolu_{uuid.uuid4().hex[:24]}"


class AnthropicProvider(BaseProvider):
    """
    Async adapter for the Anthropic Messages API.

    Attributes:
        client: The ``AsyncAnthropic`` client used for requests
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        max_tokens: int = 1024,
    ):
        super().__init__(api_key, base_url=base_url, timeout=timeout, max_tokens=max_tokens)
        self.client = AsyncAnthropic(
            api_key=api_key,
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
        )

    def default_model(self) -> str:
        return "claude-3-5-sonnet-20241022"

    # =========================================================================
    # Wire Translation
    # =========================================================================

    def _convert_params(self, request: dict[str, Any]) -> dict[str, Any]:
        messages: list[Message] = request.get("messages", [])
        system_messages = [m for m in messages if m.role == Role.SYSTEM]
        other_messages = [m for m in messages if m.role != Role.SYSTEM]

        params: dict[str, Any] = {
            "model": request.get("model") or self.default_model(),
            "max_tokens": request.get("max_tokens") or self.max_tokens,
            "messages": self._convert_messages(other_messages),
        }

        if system_messages:
            params["system"] = "\n".join(m.content or "" for m in system_messages)

        if "tools" in request:
            params["tools"] = request["tools"]
        elif "functions" in request:
            params["tools"] = [self._convert_function(f) for f in request["functions"]]

        if "temperature" in request:
            params["temperature"] = request["temperature"]

        return params

    @staticmethod
    def _convert_messages(messages: list[Message]) -> list[dict[str, Any]]:
        converted: list[dict[str, Any]] = []
        # Calls from other providers carry no id; mint one and hand it to
        # the result that follows so tool_use/tool_result pairs line up.
        pending_id: Optional[str] = None

        for message in messages:
            if message.role in (Role.FUNCTION, Role.TOOL):
                tool_use_id = message.tool_call_id or pending_id
                pending_id = None
                if tool_use_id is None:
                    converted.append({
                        "role": "user",
                        "content": f"Function result: {message.content}",
                    })
                else:
                    converted.append({
                        "role": "user",
                        "content": [{
                            "type": "tool_result",
                            "tool_use_id": tool_use_id,
                            "content": message.content or "",
                        }],
                    })
                continue

            if message.function_call is not None:
                call = message.function_call
                tool_use_id = call.id or _new_tool_use_id()
                pending_id = tool_use_id
                blocks: list[dict[str, Any]] = []
                if message.content:
                    blocks.append({"type": "text", "text": message.content})
                blocks.append({
                    "type": "tool_use",
                    "id": tool_use_id,
                    "name": call.name,
                    "input": decode_arguments(call.arguments),
                })
                converted.append({"role": "assistant", "content": blocks})
                continue

            converted.append({"role": message.role.value, "content": message.content or ""})

        return converted

    @staticmethod
    def _convert_function(schema: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": schema["name"],
            "description": schema["description"],
            "input_schema": schema["parameters"],
        }

    @staticmethod
    def _to_message(response: Any) -> Message:
        # TODO: support parallel tool calls; only the first tool_use block is used
        tool_use = next((b for b in response.content if b.type == "tool_use"), None)
        text = "".join(b.text for b in response.content if b.type == "text")

        if tool_use is not None:
            return Message(
                role=Role.ASSISTANT,
                content=text or None,
                function_call=FunctionCall(
                    name=tool_use.name,
                    arguments=json.dumps(tool_use.input),
                    id=tool_use.id,
                ),
            )
        return Message.assistant(text)

    # =========================================================================
    # Round Trips
    # =========================================================================

    async def chat(self, request: dict[str, Any]) -> Message:
        params = self._convert_params(request)
        try:
            response = await self.client.messages.create(**params)
        except anthropic.APIError as e:
            raise self._request_error(e) from e
        return self._to_message(response)

    async def _stream(self, request: dict[str, Any]) -> AsyncIterator[Union[str, Message]]:
        params = self._convert_params(request)

        full_content = ""
        tool_use: Optional[Any] = None
        tool_index: Optional[int] = None
        tool_input_json = ""

        try:
            stream = await self.client.messages.create(**params, stream=True)
            async for event in stream:
                if event.type == "content_block_start":
                    if event.content_block.type == "tool_use" and tool_use is None:
                        tool_use = event.content_block
                        tool_index = event.index
                elif event.type == "content_block_delta":
                    if event.delta.type == "text_delta":
                        full_content += event.delta.text
                        yield event.delta.text
                    elif event.delta.type == "input_json_delta" and event.index == tool_index:
                        tool_input_json += event.delta.partial_json or ""
        except anthropic.APIError as e:
            raise self._request_error(e) from e

        if tool_use is not None:
            yield Message(
                role=Role.ASSISTANT,
                content=full_content or None,
                function_call=FunctionCall(
                    name=tool_use.name,
                    arguments=tool_input_json or "{}",
                    id=tool_use.id,
                ),
            )
        else:
            yield Message.assistant(full_content)

    # =========================================================================
    # Function Calling
    # =========================================================================

    def format_functions(self, functions: list) -> dict[str, Any]:
        return {"tools": [self._convert_function(f.to_schema()) for f in functions]}

    def format_function_response(self, message: Message, result: Any) -> Message:
        return Message(
            role=Role.TOOL,
            name=message.function_call.name,
            tool_call_id=message.function_call.id,
            content=serialize_result(result),
        )
