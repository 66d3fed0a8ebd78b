"""Tests for the OpenAI adapter's wire translation."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from conftest import async_iter, function_call

from conclave.errors import ConfigurationError, ProviderRequestError
from conclave.function import Function
from conclave.models import FunctionCall, Message, Role
from conclave.providers import OpenAIProvider


@pytest.fixture
def provider():
    provider = OpenAIProvider(api_key="test-key")
    provider.client = MagicMock()
    return provider


def _completion(content=None, fn=None):
    message = SimpleNamespace(content=content, function_call=fn)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _chunk(content=None, fn=None):
    delta = SimpleNamespace(content=content, function_call=fn)
    return SimpleNamespace(choices=[SimpleNamespace(delta=delta)])


def _request(*messages, **extra):
    return {"model": "gpt-4o-mini", "messages": list(messages), **extra}


class TestConstruction:
    @pytest.mark.parametrize("api_key", [None, ""])
    def test_requires_api_key(self, api_key):
        with pytest.raises(ConfigurationError):
            OpenAIProvider(api_key=api_key)

    def test_default_model(self):
        assert OpenAIProvider(api_key="test-key").default_model() == "gpt-4o-mini"


class TestChat:
    @pytest.mark.asyncio
    async def test_plain_reply(self, provider):
        provider.client.chat.completions.create = AsyncMock(return_value=_completion("Hello!"))

        reply = await provider.chat(_request(Message.system("S"), Message.user("hi")))

        assert reply == Message.assistant("Hello!")
        assert not provider.is_function_call(reply)
        sent = provider.client.chat.completions.create.call_args.kwargs
        assert sent["model"] == "gpt-4o-mini"
        assert sent["messages"] == [
            {"role": "system", "content": "S"},
            {"role": "user", "content": "hi"},
        ]

    @pytest.mark.asyncio
    async def test_function_call_reply(self, provider):
        fn = SimpleNamespace(name="get_weather", arguments='{"location": "London"}')
        provider.client.chat.completions.create = AsyncMock(return_value=_completion(None, fn))

        reply = await provider.chat(_request(Message.user("weather?")))

        assert provider.is_function_call(reply)
        assert provider.function_name(reply) == "get_weather"
        assert provider.function_arguments(reply) == {"location": "London"}

    @pytest.mark.asyncio
    async def test_function_history_is_translated(self, provider):
        provider.client.chat.completions.create = AsyncMock(return_value=_completion("done"))
        call = function_call("get_weather", location="Oslo")
        result = provider.format_function_response(call, {"temperature": 3})

        await provider.chat(_request(Message.user("hi"), call, result, functions=[], function_call="auto"))

        sent = provider.client.chat.completions.create.call_args.kwargs
        assert sent["messages"][1]["function_call"] == {
            "name": "get_weather",
            "arguments": '{"location": "Oslo"}',
        }
        assert sent["messages"][2] == {
            "role": "function",
            "name": "get_weather",
            "content": '{"temperature": 3}',
        }
        assert sent["function_call"] == "auto"

    @pytest.mark.asyncio
    async def test_api_errors_are_wrapped(self, provider):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(400, request=request)
        body = {"error": {"message": "Invalid model"}}
        provider.client.chat.completions.create = AsyncMock(
            side_effect=openai.BadRequestError("Invalid model", response=response, body=body)
        )

        with pytest.raises(ProviderRequestError) as excinfo:
            await provider.chat(_request(Message.user("hi")))

        assert excinfo.value.status_code == 400
        assert excinfo.value.body == body


class TestStreamChat:
    @pytest.mark.asyncio
    async def test_streams_text(self, provider):
        chunks = [_chunk("Hel"), _chunk("lo"), SimpleNamespace(choices=[]), _chunk(None)]
        provider.client.chat.completions.create = AsyncMock(return_value=async_iter(chunks))

        stream = provider.stream_chat(_request(Message.user("hi")))
        fragments = [fragment async for fragment in stream]

        assert fragments == ["Hel", "lo"]
        assert stream.message == Message.assistant("Hello")
        assert provider.client.chat.completions.create.call_args.kwargs["stream"] is True

    @pytest.mark.asyncio
    async def test_function_call_fragments_are_not_forwarded(self, provider):
        chunks = [
            _chunk(fn=SimpleNamespace(name="get_weather", arguments="")),
            _chunk(fn=SimpleNamespace(name=None, arguments='{"loca')),
            _chunk(fn=SimpleNamespace(name=None, arguments='tion": "Rome"}')),
        ]
        provider.client.chat.completions.create = AsyncMock(return_value=async_iter(chunks))

        stream = provider.stream_chat(_request(Message.user("hi")))
        fragments = [fragment async for fragment in stream]

        assert fragments == []
        assert stream.message.function_call == FunctionCall(
            name="get_weather", arguments='{"location": "Rome"}'
        )

    @pytest.mark.asyncio
    async def test_collect(self, provider):
        provider.client.chat.completions.create = AsyncMock(
            return_value=async_iter([_chunk("ok")])
        )
        reply = await provider.stream_chat(_request(Message.user("hi"))).collect()
        assert reply == Message.assistant("ok")


class TestFunctionPrimitives:
    def test_format_functions(self, provider):
        weather = Function("get_weather", "Weather", {"properties": {}}, lambda: None)

        assert provider.format_functions([weather]) == {
            "functions": [{
                "name": "get_weather",
                "description": "Weather",
                "parameters": {"properties": {}, "type": "object"},
            }],
            "function_call": "auto",
        }

    def test_format_function_response(self, provider):
        result = provider.format_function_response(function_call("get_weather"), {"ok": True})

        assert result.role == Role.FUNCTION
        assert result.name == "get_weather"
        assert json.loads(result.content) == {"ok": True}
