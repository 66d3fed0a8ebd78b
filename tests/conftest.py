"""Shared fixtures: a scripted provider that never touches the network."""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Iterable

import pytest

from conclave.models import FunctionCall, Message, Role
from conclave.providers.base import BaseProvider


class FakeProvider(BaseProvider):
    """
    Provider that replays scripted replies and records every request.

    Streamed replies are split into one fragment per character.
    """

    name = "fake"

    def __init__(self, replies: Iterable[Message] = ()):
        super().__init__(api_key="test-key")
        self.replies = list(replies)
        self.requests: list[dict[str, Any]] = []

    def default_model(self) -> str:
        return "fake-model"

    def _next_reply(self, request: dict[str, Any]) -> Message:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("FakeProvider ran out of scripted replies")
        return self.replies.pop(0)

    async def chat(self, request: dict[str, Any]) -> Message:
        return self._next_reply(request)

    async def _stream(self, request: dict[str, Any]) -> AsyncIterator[Any]:
        reply = self._next_reply(request)
        if reply.function_call is None:
            for char in reply.content or "":
                yield char
        yield reply

    def format_functions(self, functions: list) -> dict[str, Any]:
        return {"functions": [f.to_schema() for f in functions]}

    def format_function_response(self, message: Message, result: Any) -> Message:
        return Message(
            role=Role.FUNCTION,
            name=message.function_call.name,
            content=json.dumps(result),
        )


def function_call(name: str, **arguments: Any) -> Message:
    """An assistant reply asking for a function call."""
    return Message(
        role=Role.ASSISTANT,
        function_call=FunctionCall(name=name, arguments=json.dumps(arguments)),
    )


async def async_iter(items: Iterable[Any]) -> AsyncIterator[Any]:
    for item in items:
        yield item


@pytest.fixture
def provider_factory():
    def make(*replies: Message) -> FakeProvider:
        return FakeProvider(replies)

    return make
