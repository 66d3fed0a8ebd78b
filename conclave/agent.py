"""
Agent
=====

An Agent wraps a provider connection with a system prompt, a set of
callable functions and a termination policy, and runs the conversation
loop against the provider.

One ``chat()`` call works like this:
    1. Normalize the input and put the system prompt at position 0
    2. Ask the termination policy whether another turn may begin
    3. Send the whole history to the provider (streaming if a sink is given)
    4. Append the reply
    5. If the reply is a function call, run the function, append its
       result and go back to step 2; otherwise stop

Usage:
    >>> agent = Agent(
    ...     name="WeatherAssistant",
    ...     description="Helps with weather-related queries",
    ...     system_message="You answer questions about the weather.",
    ...     functions=[weather],
    ...     config=config,
    ... )
    >>> history = await agent.chat("What's the weather like in London?", print)
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Iterable, Optional, Union

from conclave.config import ConclaveConfig
from conclave.errors import FunctionNotFound, InvalidArguments, ProviderRequestError
from conclave.function import Function
from conclave.models import Message, MessageInput, ProviderType, Role, to_messages
from conclave.providers import BaseProvider
from conclave.providers.base import serialize_result
from conclave.termination import MaxMessages, Termination

logger = logging.getLogger(__name__)

# Receives streamed text; may be a plain function or a coroutine function
TextSink = Callable[[str], Any]


async def emit(sink: TextSink, fragment: str) -> None:
    result = sink(fragment)
    if inspect.isawaitable(result):
        await result


class Agent:
    """
    A configured binding of a system prompt, a provider and a function set.

    The configuration is fixed once the agent is constructed; defaults come
    from the ``ConclaveConfig`` passed in and are resolved here, once.

    Attributes:
        name: Unique name; supervisors delegate to agents by this name
        description: What the agent is good at, shown to supervisors
        system_message: System prompt, or ``None`` for no system message
        functions: Functions the model may call
        provider: The provider adapter used for every turn
        model: Model identifier sent with every request
        termination: Policy consulted before every turn
        chat_history: Copy of the latest conversation, reset by every ``chat()``
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        system_message: Optional[str] = None,
        functions: Optional[Iterable[Function]] = None,
        provider: Union[BaseProvider, ProviderType, str, None] = None,
        model: Optional[str] = None,
        termination: Optional[Termination] = None,
        config: Optional[ConclaveConfig] = None,
    ):
        """
        Initialize an Agent.

        Args:
            name: Agent name, unique within an agency
            description: Short description of the agent's speciality
            system_message: System prompt placed at the start of every request
            functions: Functions exposed to the model; names must be unique
            provider: An adapter instance, or a provider key resolved through
                      ``config``. Defaults to ``config.default_provider``.
            model: Model identifier. Defaults to ``config.default_model`` when
                   the agent uses the default provider, then to the
                   provider's own default.
            termination: Turn policy. Defaults to
                         ``MaxMessages(config.defaults.max_messages)``.
            config: Shared configuration; a default one is used if omitted

        Raises:
            ConfigurationError: If the provider can't be created.
            ValueError: If two functions share a name.
        """
        config = config or ConclaveConfig()

        self.name = name
        self.description = description
        self.system_message = system_message
        self.functions: tuple[Function, ...] = tuple(functions or ())

        names = [f.name for f in self.functions]
        duplicates = {n for n in names if names.count(n) > 1}
        if duplicates:
            raise ValueError(f"Duplicate function names for agent '{name}': {sorted(duplicates)}")

        if isinstance(provider, BaseProvider):
            self.provider = provider
            uses_default = provider.name == config.default_provider.value
            default_model = config.default_model if uses_default else None
        else:
            self.provider = config.client_for(provider)
            default_model = config.model_for(provider)

        self.model = model or default_model or self.provider.default_model()
        self.termination = termination or MaxMessages(config.defaults.max_messages)
        self.chat_history: list[Message] = []

    # =========================================================================
    # Function Calling
    # =========================================================================

    def find_function(self, name: str) -> Function:
        """
        Look up one of the agent's functions by name.

        Raises:
            FunctionNotFound: If the agent has no function with that name.
        """
        for function in self.functions:
            if function.name == name:
                return function
        raise FunctionNotFound(name)

    async def handle_function_call(self, reply: Message) -> Any:
        """
        Run the function a reply asks for and return its result.

        Bad arguments don't abort the conversation: the error is returned as
        the result so the model can retry with corrected arguments.

        Raises:
            FunctionNotFound: If the requested function doesn't exist.
        """
        function = self.find_function(self.provider.function_name(reply))
        try:
            arguments = self.provider.function_arguments(reply)
            return await function.call(**arguments)
        except InvalidArguments as e:
            logger.warning(f"Invalid arguments for {function.name} from {self.name}: {e}")
            return {"error": str(e)}

    def formatted_functions(self) -> dict[str, Any]:
        return self.provider.format_functions(list(self.functions))

    # =========================================================================
    # Conversation Loop
    # =========================================================================

    def _prepare_history(self, messages: MessageInput) -> list[Message]:
        history = to_messages(messages)
        if self.system_message is not None:
            history = [m for m in history if m.role != Role.SYSTEM]
            history.insert(0, Message.system(self.system_message))
        return history

    def _build_request(self, history: list[Message]) -> dict[str, Any]:
        request: dict[str, Any] = {"model": self.model, "messages": list(history)}
        if self.functions:
            request.update(self.formatted_functions())
        return request

    async def _send(self, request: dict[str, Any], on_text: Optional[TextSink]) -> Message:
        try:
            if on_text is None:
                return await self.provider.chat(request)

            stream = self.provider.stream_chat(request)
            async for fragment in stream:
                await emit(on_text, fragment)
            if stream.message is None:
                raise ProviderRequestError(f"{self.provider.name} stream ended without a reply")
            return stream.message
        except ProviderRequestError as e:
            logger.error(f"Error calling {self.provider.name} API for {self.name}: {e.body or e}")
            raise

    async def chat(
        self,
        messages: MessageInput,
        on_text: Optional[TextSink] = None,
    ) -> list[Message]:
        """
        Run one conversation and return the full history.

        Args:
            messages: A user message string, or a prior conversation.
            on_text: Optional sink for streamed text. When given, replies are
                     streamed and function calls are reported to it too.

        Returns:
            The conversation history, starting with the system message when
            the agent has one.

        Raises:
            FunctionNotFound: If the model calls an unknown function.
            ProviderRequestError: If a provider call fails.
        """
        history = self._prepare_history(messages)
        self.chat_history = list(history)

        while self.termination.should_continue(history):
            request = self._build_request(history)
            logger.debug(
                f"{self.name}: calling {self.provider.name} ({self.model}) "
                f"with {len(history)} messages"
            )

            reply = await self._send(request, on_text)
            history.append(reply)
            self.chat_history.append(reply)

            if not self.provider.is_function_call(reply):
                break

            result = await self.handle_function_call(reply)
            if on_text is not None:
                await emit(on_text, f"\n[Function Call: {serialize_result(reply.to_dict())}]\n")
                await emit(on_text, f"{serialize_result(result)}\n")

            history.append(self.provider.format_function_response(reply, result))

        return history

    def __repr__(self) -> str:
        return f"Agent(name='{self.name}', model='{self.model}')"
