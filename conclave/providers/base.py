"""
Base Provider
=============

Abstract base class for all provider adapters. An adapter translates the
provider-agnostic chat request used by ``Agent`` into one vendor's wire
schema, executes it, and translates the reply back into a canonical
``Message``.

A request is a plain dict::

    {
        "model": "gpt-4o-mini",
        "messages": [Message, ...],
        # plus whatever format_functions() returned, when the agent
        # exposes functions
    }

Every adapter provides:
    1. ``chat()`` for a single blocking round trip
    2. ``stream_chat()`` for the same round trip as a ``ChatStream``
    3. ``format_functions()`` to declare callable tools
    4. The four function-call primitives the agent's turn loop relies on
"""

from __future__ import annotations

import abc
import json
from typing import TYPE_CHECKING, Any, AsyncIterator, Optional, Union

from conclave.errors import ConfigurationError, InvalidArguments, ProviderRequestError
from conclave.models import Message

if TYPE_CHECKING:
    from conclave.function import Function


class ChatStream:
    """
    Async iterator over the text fragments of one streamed reply.

    Only plain text is yielded; function-call fragments are assembled
    silently by the adapter. Once the stream has been fully drained,
    ``message`` holds the assembled reply. Stopping early abandons the
    underlying transport read and leaves ``message`` unset.

    Example:
        >>> stream = provider.stream_chat(request)
        >>> async for fragment in stream:
        ...     print(fragment, end="")
        >>> reply = stream.message
    """

    def __init__(self, events: AsyncIterator[Union[str, Message]]):
        self._events = events
        self.message: Optional[Message] = None

    def __aiter__(self) -> AsyncIterator[str]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[str]:
        async for event in self._events:
            if isinstance(event, Message):
                self.message = event
            else:
                yield event

    async def collect(self) -> Message:
        """Drain the stream and return the assembled message."""
        async for _ in self:
            pass
        if self.message is None:
            raise ProviderRequestError("Stream ended without a final message")
        return self.message


def normalize_text(value: Any) -> str:
    """Best-effort conversion of SDK content shapes to plain text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, dict):
        text = value.get("text") or value.get("content") or value.get("value")
        return text if isinstance(text, str) else ""
    if isinstance(value, list):
        parts: list[str] = []
        for item in value:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict):
                # Content part objects like {"type": "text", "text": "..."}
                text = item.get("text") or item.get("content")
                if isinstance(text, str):
                    parts.append(text)
            else:
                text = getattr(item, "text", None)
                if isinstance(text, str):
                    parts.append(text)
        return "".join(parts)
    text = getattr(value, "text", None)
    return text if isinstance(text, str) else ""


def serialize_result(result: Any) -> str:
    """Serialize a function result for the provider, verbatim."""
    return json.dumps(result, default=str)


def decode_arguments(raw: Optional[str]) -> dict[str, Any]:
    """
    Decode recorded function-call arguments for a vendor that wants an object.

    Malformed or non-object arguments are kept under ``"raw"`` so that a
    history holding a bad call can still be sent.
    """
    try:
        arguments = json.loads(raw or "{}")
    except json.JSONDecodeError:
        return {"raw": raw}
    return arguments if isinstance(arguments, dict) else {"raw": raw}


class BaseProvider(abc.ABC):
    """
    Abstract base class for provider adapters.

    Subclasses implement the wire translation for one vendor. The
    function-call primitives work on the canonical ``Message`` and are
    shared, except ``format_function_response`` which decides how a
    function result is represented for that vendor.

    Attributes:
        api_key: API key for the provider
        base_url: Optional override of the API endpoint
        timeout: Request timeout in seconds
        max_tokens: Default cap on generated tokens, when the vendor needs one
    """

    name = "base"

    def __init__(
        self,
        api_key: Optional[str],
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        max_tokens: int = 1024,
    ):
        """
        Initialize the adapter.

        Raises:
            ConfigurationError: If the API key is missing or empty.
        """
        if not api_key:
            raise ConfigurationError(f"{self.name} API key is required")
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens

    # =========================================================================
    # Round Trips
    # =========================================================================

    @abc.abstractmethod
    async def chat(self, request: dict[str, Any]) -> Message:
        """Send one request and return the reply as a canonical message."""
        ...  # pragma: no cover

    def stream_chat(self, request: dict[str, Any]) -> ChatStream:
        """
        Send one request and stream the reply.

        Returns:
            A ``ChatStream`` yielding text fragments; the assembled reply
            is available as ``stream.message`` once drained.
        """
        return ChatStream(self._stream(request))

    @abc.abstractmethod
    def _stream(self, request: dict[str, Any]) -> AsyncIterator[Union[str, Message]]:
        """
        Yield text fragments as they arrive, then the final ``Message``.
        """
        ...  # pragma: no cover

    # =========================================================================
    # Function Calling
    # =========================================================================

    @abc.abstractmethod
    def format_functions(self, functions: list["Function"]) -> dict[str, Any]:
        """Build the request fragment that declares callable tools."""
        ...  # pragma: no cover

    def is_function_call(self, message: Message) -> bool:
        return message.function_call is not None

    def function_name(self, message: Message) -> str:
        return message.function_call.name

    def function_arguments(self, message: Message) -> dict[str, Any]:
        """
        Parse the arguments of a function-call message.

        Raises:
            InvalidArguments: If the arguments are not a JSON object.
        """
        raw = message.function_call.arguments or "{}"
        try:
            arguments = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidArguments(f"Arguments are not valid JSON: {e}") from e
        if not isinstance(arguments, dict):
            raise InvalidArguments("Arguments must be a JSON object")
        return arguments

    @abc.abstractmethod
    def format_function_response(self, message: Message, result: Any) -> Message:
        """Build the message that carries a function result back to the model."""
        ...  # pragma: no cover

    @abc.abstractmethod
    def default_model(self) -> str:
        ...  # pragma: no cover

    def _request_error(self, error: Exception) -> ProviderRequestError:
        """Wrap an SDK error so callers can tell transport failures apart."""
        return ProviderRequestError(
            f"{self.name} request failed: {error}",
            body=getattr(error, "body", None),
            status_code=getattr(error, "status_code", None),
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(default_model='{self.default_model()}')"
