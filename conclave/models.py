"""
Data Models & Schemas
=====================

Pydantic models that define the data structures used throughout Conclave.
These models give every layer (agents, agencies, provider adapters) one
canonical shape for conversation messages and configuration, so that the
provider-specific wire formats stay confined to the adapters.

Key Models:
    - ``Message``: A single entry in a conversation history
    - ``FunctionCall``: A model's request to invoke a host function
    - ``AgentConfig``: Configuration for a single agent (prompt + provider)
    - ``AgencyPreset``: A pre-configured agency (agents + topology)
"""

from __future__ import annotations

import enum
from typing import Any, Iterable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Enums
# =============================================================================


class Role(str, enum.Enum):
    """Who authored a message in the conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"    # OpenAI-style function result
    TOOL = "tool"            # Anthropic-style tool result


class ProviderType(str, enum.Enum):
    """Supported LLM providers."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class AgencyType(str, enum.Enum):
    """Available agency topologies."""

    SUPERVISOR = "supervisor"   # One supervisor delegates to peers by name
    WORKFLOW = "workflow"       # Agents run in a fixed sequence


# =============================================================================
# Conversation Messages
# =============================================================================


class FunctionCall(BaseModel):
    """
    A model's request to invoke a host-side function.

    Attributes:
        name: Name of the function to invoke
        arguments: The arguments as a JSON-encoded object
        id: Provider tool-use identifier, when the provider assigns one
    """

    model_config = ConfigDict(frozen=True)

    name: str
    arguments: str = "{}"
    id: Optional[str] = None


class Message(BaseModel):
    """
    A single message in a conversation history.

    Messages are immutable; a history grows only by appending new ones.

    Attributes:
        role: Who authored the message
        content: Text content (``None`` for a bare function call)
        function_call: Set when the assistant asked for a function call
        name: Function name, set on function-result messages
        tool_call_id: Provider tool-use id a function result answers
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    content: Optional[str] = None
    function_call: Optional[FunctionCall] = None
    name: Optional[str] = None
    tool_call_id: Optional[str] = None

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: Optional[str]) -> "Message":
        return cls(role=Role.ASSISTANT, content=content)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary, dropping unset fields."""
        return self.model_dump(mode="json", exclude_none=True)


MessageInput = Union[str, Message, dict, Iterable[Union[str, Message, dict]]]


def to_messages(messages: MessageInput) -> list[Message]:
    """
    Normalize caller input into a fresh list of ``Message`` objects.

    A bare string becomes a single user message. A sequence may mix
    ``Message`` objects, role/content dicts and bare strings; bare strings
    become user messages. The caller's sequence is never modified.

    Args:
        messages: A string, a single message, or a sequence of messages.

    Returns:
        A new list of ``Message`` objects.
    """
    if isinstance(messages, (str, Message, dict)):
        messages = [messages]

    normalized: list[Message] = []
    for item in messages:
        if isinstance(item, Message):
            normalized.append(item)
        elif isinstance(item, str):
            normalized.append(Message.user(item))
        else:
            normalized.append(Message.model_validate(item))
    return normalized


# =============================================================================
# Agent & Agency Configuration
# =============================================================================


class AgentConfig(BaseModel):
    """
    Configuration for a single agent.

    Attributes:
        name: Unique agent name; delegation looks agents up by this name
        description: What the agent is good at (shown to supervisors)
        system_message: System prompt that shapes the agent's behavior
        provider: Provider key; falls back to the configured default
        model: Model identifier; falls back to the provider's default
        functions: Names of functions (registered on the engine) to expose
        max_messages: Message cap for the agent's termination policy
        timeout_seconds: Optional deadline for each conversation
    """

    name: str
    description: str = ""
    system_message: Optional[str] = None
    provider: Optional[ProviderType] = None
    model: Optional[str] = None
    functions: list[str] = Field(default_factory=list)
    max_messages: Optional[int] = None
    timeout_seconds: Optional[float] = None


class AgencyPreset(BaseModel):
    """
    A pre-configured agency setup.

    Attributes:
        name: Display name (e.g., "Travel Desk")
        description: What this agency is best suited for
        type: The composition topology
        agents: Keys of agents in the config's ``agents`` section, in order
        custom_instructions: Extra instructions for the supervisor prompt
    """

    name: str
    description: str = ""
    type: AgencyType = AgencyType.SUPERVISOR
    agents: list[str] = Field(default_factory=list)
    custom_instructions: Optional[str] = None
