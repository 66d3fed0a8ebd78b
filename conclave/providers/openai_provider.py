"""
OpenAI Provider
===============

Adapter for OpenAI's chat completions API (and any OpenAI-compatible
server, via ``base_url``).

Function calling uses the ``functions`` / ``function_call`` request
fields: the model answers with an inline ``function_call`` whose
arguments are a JSON string, and results go back as ``role="function"``
messages carrying the function name.

Usage:
    >>> provider = OpenAIProvider(api_key="sk-...")
    >>> reply = await provider.chat({"model": "gpt-4o-mini", "messages": history})
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Optional, Union

import httpx
import openai
from openai import AsyncOpenAI

from conclave.models import FunctionCall, Message, Role
from conclave.providers.base import BaseProvider, normalize_text, serialize_result

logger = logging.getLogger(__name__)

# Request keys forwarded verbatim to the API when present
PASSTHROUGH_KEYS = ("functions", "function_call", "temperature", "max_tokens")


class OpenAIProvider(BaseProvider):
    """
    Async adapter for the OpenAI chat completions API.

    Attributes:
        client: The ``AsyncOpenAI`` client used for requests
    """

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        max_tokens: int = 1024,
    ):
        super().__init__(api_key, base_url=base_url, timeout=timeout, max_tokens=max_tokens)
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=httpx.Timeout(timeout, connect=10.0),
        )

    def default_model(self) -> str:
        return "gpt-4o-mini"

    # =========================================================================
    # Wire Translation
    # =========================================================================

    @staticmethod
    def _convert_message(message: Message) -> dict[str, Any]:
        if message.role in (Role.FUNCTION, Role.TOOL):
            return {
                "role": "function",
                "name": message.name,
                "content": message.content or "",
            }

        wire: dict[str, Any] = {"role": message.role.value, "content": message.content}
        if message.function_call is not None:
            wire["function_call"] = {
                "name": message.function_call.name,
                "arguments": message.function_call.arguments,
            }
        return wire

    def _convert_params(self, request: dict[str, Any]) -> dict[str, Any]:
        params: dict[str, Any] = {
            "model": request.get("model") or self.default_model(),
            "messages": [self._convert_message(m) for m in request.get("messages", [])],
        }
        for key in PASSTHROUGH_KEYS:
            if key in request:
                params[key] = request[key]
        return params

    @staticmethod
    def _to_message(wire_message: Any) -> Message:
        function_call = getattr(wire_message, "function_call", None)
        content = normalize_text(getattr(wire_message, "content", None)) or None
        if function_call is not None:
            return Message(
                role=Role.ASSISTANT,
                content=content,
                function_call=FunctionCall(
                    name=function_call.name,
                    arguments=function_call.arguments or "{}",
                ),
            )
        return Message(role=Role.ASSISTANT, content=content or "")

    # =========================================================================
    # Round Trips
    # =========================================================================

    async def chat(self, request: dict[str, Any]) -> Message:
        params = self._convert_params(request)
        try:
            completion = await self.client.chat.completions.create(**params)
        except openai.APIError as e:
            raise self._request_error(e) from e

        if not completion.choices:
            return Message.assistant("")
        return self._to_message(completion.choices[0].message)

    async def _stream(self, request: dict[str, Any]) -> AsyncIterator[Union[str, Message]]:
        params = self._convert_params(request)
        params["stream"] = True

        full_content = ""
        function_name: Optional[str] = None
        function_args = ""

        try:
            stream = await self.client.chat.completions.create(**params)
            async for chunk in stream:
                if not chunk.choices:
                    continue

                delta = chunk.choices[0].delta
                function_call = getattr(delta, "function_call", None)
                if function_call is not None:
                    # Arguments arrive in pieces and are never shown to the caller
                    if function_call.name:
                        function_name = function_call.name
                    if function_call.arguments:
                        function_args += function_call.arguments
                    continue

                content = normalize_text(getattr(delta, "content", None))
                if content:
                    full_content += content
                    yield content
        except openai.APIError as e:
            raise self._request_error(e) from e

        if function_name:
            yield Message(
                role=Role.ASSISTANT,
                content=full_content or None,
                function_call=FunctionCall(name=function_name, arguments=function_args or "{}"),
            )
        else:
            yield Message.assistant(full_content)

    # =========================================================================
    # Function Calling
    # =========================================================================

    def format_functions(self, functions: list) -> dict[str, Any]:
        return {
            "functions": [f.to_schema() for f in functions],
            "function_call": "auto",
        }

    def format_function_response(self, message: Message, result: Any) -> Message:
        return Message(
            role=Role.FUNCTION,
            name=message.function_call.name,
            content=serialize_result(result),
        )
