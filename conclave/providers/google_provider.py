"""
Google Provider
===============

Adapter for the Gemini API through the ``google-genai`` SDK.

Gemini's conversation model:
    - The system prompt is ``system_instruction`` in the request config
    - Assistant turns use the role ``"model"``
    - Function calls and results are ``function_call`` /
      ``function_response`` parts, with native JSON arguments
    - Tools are declared as ``function_declarations``
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Optional, Union

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from conclave.models import FunctionCall, Message, Role
from conclave.providers.base import BaseProvider, decode_arguments, serialize_result

logger = logging.getLogger(__name__)


def _response_parts(response: Any) -> list[Any]:
    candidates = getattr(response, "candidates", None) or []
    if not candidates or candidates[0].content is None:
        return []
    return candidates[0].content.parts or []


class GoogleProvider(BaseProvider):
    """
    Async adapter for the Gemini API.

    Attributes:
        client: The ``genai.Client``; requests go through ``client.aio``
    """

    name = "google"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        max_tokens: int = 1024,
    ):
        super().__init__(api_key, base_url=base_url, timeout=timeout, max_tokens=max_tokens)
        self.client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(base_url=base_url, timeout=int(timeout * 1000)),
        )

    def default_model(self) -> str:
        return "gemini-2.0-flash"

    # =========================================================================
    # Wire Translation
    # =========================================================================

    @staticmethod
    def _convert_message(message: Message) -> types.Content:
        if message.role in (Role.FUNCTION, Role.TOOL):
            try:
                payload = json.loads(message.content or "null")
            except json.JSONDecodeError:
                payload = message.content
            if not isinstance(payload, dict):
                payload = {"result": payload}
            return types.Content(
                role="user",
                parts=[types.Part.from_function_response(name=message.name or "", response=payload)],
            )

        if message.role == Role.ASSISTANT:
            parts = []
            if message.content:
                parts.append(types.Part(text=message.content))
            if message.function_call is not None:
                parts.append(types.Part(function_call=types.FunctionCall(
                    name=message.function_call.name,
                    args=decode_arguments(message.function_call.arguments),
                    id=message.function_call.id,
                )))
            return types.Content(role="model", parts=parts or [types.Part(text="")])

        return types.Content(role="user", parts=[types.Part(text=message.content or "")])

    def _build_config(self, request: dict[str, Any], messages: list[Message]) -> types.GenerateContentConfig:
        system = [m.content or "" for m in messages if m.role == Role.SYSTEM]
        return types.GenerateContentConfig(
            system_instruction="\n".join(system) if system else None,
            tools=request.get("tools"),
            max_output_tokens=request.get("max_tokens") or self.max_tokens,
            temperature=request.get("temperature"),
        )

    def _convert_params(self, request: dict[str, Any]) -> dict[str, Any]:
        messages: list[Message] = request.get("messages", [])
        return {
            "model": request.get("model") or self.default_model(),
            "contents": [self._convert_message(m) for m in messages if m.role != Role.SYSTEM],
            "config": self._build_config(request, messages),
        }

    @staticmethod
    def _to_message(text: str, function_call: Optional[Any]) -> Message:
        if function_call is not None:
            return Message(
                role=Role.ASSISTANT,
                content=text or None,
                function_call=FunctionCall(
                    name=function_call.name,
                    arguments=json.dumps(function_call.args or {}),
                    id=function_call.id,
                ),
            )
        return Message.assistant(text)

    @staticmethod
    def _read_parts(response: Any) -> tuple[str, Optional[Any]]:
        """Return (text, first function call) from a response or stream chunk."""
        text = ""
        function_call = None
        for part in _response_parts(response):
            if part.text and not getattr(part, "thought", False):
                text += part.text
            if part.function_call is not None and function_call is None:
                function_call = part.function_call
        return text, function_call

    # =========================================================================
    # Round Trips
    # =========================================================================

    async def chat(self, request: dict[str, Any]) -> Message:
        params = self._convert_params(request)
        try:
            response = await self.client.aio.models.generate_content(**params)
        except genai_errors.APIError as e:
            raise self._request_error(e) from e
        return self._to_message(*self._read_parts(response))

    async def _stream(self, request: dict[str, Any]) -> AsyncIterator[Union[str, Message]]:
        params = self._convert_params(request)

        full_content = ""
        function_call = None

        try:
            stream = await self.client.aio.models.generate_content_stream(**params)
            async for chunk in stream:
                text, call = self._read_parts(chunk)
                if call is not None and function_call is None:
                    function_call = call
                if text:
                    full_content += text
                    yield text
        except genai_errors.APIError as e:
            raise self._request_error(e) from e

        yield self._to_message(full_content, function_call)

    def _request_error(self, error: Exception):
        wrapped = super()._request_error(error)
        wrapped.body = getattr(error, "details", None)
        wrapped.status_code = getattr(error, "code", None)
        return wrapped

    # =========================================================================
    # Function Calling
    # =========================================================================

    def format_functions(self, functions: list) -> dict[str, Any]:
        declarations = [
            types.FunctionDeclaration(
                name=schema["name"],
                description=schema["description"],
                parameters_json_schema=schema["parameters"],
            )
            for schema in (f.to_schema() for f in functions)
        ]
        return {"tools": [types.Tool(function_declarations=declarations)]}

    def format_function_response(self, message: Message, result: Any) -> Message:
        return Message(
            role=Role.FUNCTION,
            name=message.function_call.name,
            tool_call_id=message.function_call.id,
            content=serialize_result(result),
        )
