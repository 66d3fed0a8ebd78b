"""Tests for Function validation and schema output."""

from unittest.mock import MagicMock

import pytest

from conclave.errors import InvalidArguments
from conclave.function import Function


def _weather(handler):
    return Function(
        name="get_weather",
        description="Get the current weather for a location",
        parameters={
            "properties": {
                "location": {"type": "string"},
                "unit": {"type": "string"},
            },
            "required": ["location"],
        },
        handler=handler,
    )


class TestFunctionCall:
    @pytest.mark.asyncio
    async def test_invokes_handler_and_returns_result_unchanged(self):
        result = {"temperature": 22, "unit": "celsius"}
        handler = MagicMock(return_value=result)

        assert await _weather(handler).call(location="London") is result
        handler.assert_called_once_with(location="London")

    @pytest.mark.asyncio
    async def test_awaits_async_handlers(self):
        async def handler(location, unit="celsius"):
            return {"location": location, "unit": unit}

        result = await _weather(handler).call(location="Paris", unit="kelvin")
        assert result == {"location": "Paris", "unit": "kelvin"}

    @pytest.mark.asyncio
    async def test_missing_required_parameter_never_invokes_handler(self):
        handler = MagicMock()

        with pytest.raises(InvalidArguments, match="missing keyword: location"):
            await _weather(handler).call(unit="celsius")

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_undeclared_parameter_never_invokes_handler(self):
        handler = MagicMock()

        with pytest.raises(InvalidArguments, match="unexpected keyword: country"):
            await _weather(handler).call(location="Paris", country="FR")

        handler.assert_not_called()

    @pytest.mark.asyncio
    async def test_additional_properties_are_passed_through(self):
        handler = MagicMock(return_value="ok")
        function = Function(
            "search", "Search", {"properties": {"q": {}}, "additionalProperties": True}, handler
        )

        assert await function.call(q="x", limit=3) == "ok"
        handler.assert_called_once_with(q="x", limit=3)

    @pytest.mark.asyncio
    async def test_optional_parameters_may_be_omitted(self):
        handler = MagicMock(return_value="sunny")
        assert await _weather(handler).call(location="Oslo") == "sunny"


class TestFunctionSchema:
    def test_defaults_type_to_object(self):
        function = _weather(lambda location: None)
        assert function.parameters["type"] == "object"

    def test_keeps_explicit_type(self):
        function = Function("noop", "Does nothing", {"type": "object", "properties": {}}, lambda: None)
        assert function.to_schema() == {
            "name": "noop",
            "description": "Does nothing",
            "parameters": {"type": "object", "properties": {}},
        }

    def test_does_not_mutate_caller_parameters(self):
        parameters = {"properties": {}}
        Function("noop", "Does nothing", parameters, lambda: None)
        assert "type" not in parameters

    def test_requires_a_handler(self):
        with pytest.raises(TypeError, match="needs a handler"):
            Function("noop", "Does nothing", {})

    def test_subclass_may_override_perform(self):
        class Echo(Function):
            def perform(self, text):
                return text

        echo = Echo("echo", "Echo text", {"required": ["text"]})
        assert echo.required_parameters == ["text"]
