"""
Function
========

A ``Function`` is a named, schema-described unit of host-side logic that
a model can ask to invoke. The schema is a JSON-Schema object; each
provider adapter wraps ``to_schema()`` in its own tool declaration.

Usage:
    >>> weather = Function(
    ...     name="get_weather",
    ...     description="Get the current weather for a location",
    ...     parameters={
    ...         "properties": {"location": {"type": "string"}},
    ...         "required": ["location"],
    ...     },
    ...     handler=lambda location: {"temperature": 22, "location": location},
    ... )
    >>> await weather.call(location="London")
    {'temperature': 22, 'location': 'London'}
"""

from __future__ import annotations

import inspect
from typing import Any, Callable, Optional

from conclave.errors import InvalidArguments


class Function:
    """
    A callable exposed to the model.

    Handlers may be plain functions or coroutine functions. Subclasses can
    override ``perform()`` instead of passing a handler.

    Attributes:
        name: Unique name within an agent's function set
        description: What the function does, as shown to the model
        parameters: JSON-Schema object describing the keyword arguments
    """

    def __init__(
        self,
        name: str,
        description: str,
        parameters: Optional[dict[str, Any]] = None,
        handler: Optional[Callable[..., Any]] = None,
    ):
        if handler is None and type(self).perform is Function.perform:
            raise TypeError(f"Function '{name}' needs a handler")

        self.name = name
        self.description = description
        self.parameters = dict(parameters or {})
        self.parameters.setdefault("type", "object")
        self.handler = handler

    @property
    def required_parameters(self) -> list[str]:
        return list(self.parameters.get("required", []))

    def unexpected_parameters(self, kwargs: dict[str, Any]) -> list[str]:
        """Keywords outside the declared properties; empty when none are declared."""
        properties = self.parameters.get("properties")
        if not properties or self.parameters.get("additionalProperties"):
            return []
        return [k for k in kwargs if k not in properties]

    async def call(self, **kwargs: Any) -> Any:
        """
        Validate the arguments and invoke the function.

        The handler's return value is passed back unchanged.

        Raises:
            InvalidArguments: If a required parameter is missing or an
                undeclared one is given. The handler is not invoked then.
        """
        missing = [p for p in self.required_parameters if p not in kwargs]
        if missing:
            raise InvalidArguments(f"missing keyword: {missing[0]}")

        unexpected = self.unexpected_parameters(kwargs)
        if unexpected:
            raise InvalidArguments(f"unexpected keyword: {unexpected[0]}")

        result = self.perform(**kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def perform(self, **kwargs: Any) -> Any:
        return self.handler(**kwargs)

    def to_schema(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }

    def __repr__(self) -> str:
        return f"Function(name='{self.name}')"
