"""
Base Agency
===========

Abstract base class for all agencies. An agency owns a set of agents and
decides how a conversation flows between them.

An agency is responsible for:
    1. Keeping agent names unique, since delegation looks agents up by name
    2. Normalizing caller input into a message history
    3. Routing the conversation through its agents
"""

from __future__ import annotations

import abc
from typing import Iterable, Optional

from conclave.agent import Agent, TextSink
from conclave.config import ConclaveConfig
from conclave.errors import ConfigurationError
from conclave.models import AgencyPreset, Message, MessageInput


class BaseAgency(abc.ABC):
    """
    Abstract base class for agency topologies.

    Subclasses must implement ``chat()``.

    Attributes:
        agents: The member agents, in order
        max_delegation_depth: Bound on nested delegation (``None`` = unbounded)
    """

    def __init__(
        self,
        agents: Optional[Iterable[Agent]] = None,
        max_delegation_depth: Optional[int] = None,
    ):
        self.agents: list[Agent] = []
        self.max_delegation_depth = max_delegation_depth
        for agent in agents or ():
            self.register(agent)

    @classmethod
    def from_preset(
        cls,
        agents: Iterable[Agent],
        preset: AgencyPreset,
        config: ConclaveConfig,
    ) -> "BaseAgency":
        """Build the agency described by a configuration preset."""
        return cls(agents, max_delegation_depth=config.max_delegation_depth)

    def register(self, agent: Agent) -> None:
        """
        Add an agent to the agency.

        Raises:
            ConfigurationError: If an agent with the same name is already a member.
        """
        if self.find_agent(agent.name) is not None:
            raise ConfigurationError(f"Duplicate agent name in agency: {agent.name}")
        self.agents.append(agent)

    def find_agent(self, name: str) -> Optional[Agent]:
        """Return the member with exactly this name, or ``None``."""
        return next((agent for agent in self.agents if agent.name == name), None)

    @abc.abstractmethod
    async def chat(
        self,
        messages: MessageInput,
        on_text: Optional[TextSink] = None,
    ) -> list[Message]:
        """
        Run one conversation through the agency.

        Args:
            messages: A user message string, a list of strings, or a prior
                      conversation.
            on_text: Optional sink for streamed text.

        Returns:
            The resulting conversation history.
        """
        ...  # pragma: no cover

    def __repr__(self) -> str:
        return f"{type(self).__name__}(agents={[a.name for a in self.agents]})"
