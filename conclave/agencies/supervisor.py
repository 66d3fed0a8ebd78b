"""
Supervisor Agency
=================

One synthetic supervisor agent receives every conversation and routes
work to the member agents through the ``delegate_to`` function.

Flow:
    1. **Supervisor** reads the request and picks a specialist
    2. **Specialist** runs a one-shot conversation on the delegated task
    3. **Supervisor** reviews the answer and either replies to the user or
       delegates again

The supervisor is created by ``SupervisorAgency.create()`` and is also
registered as a member, so it can be found by name.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Union

from conclave.agencies.base import BaseAgency
from conclave.agent import Agent, TextSink
from conclave.config import ConclaveConfig
from conclave.errors import SupervisorNotSet
from conclave.models import AgencyPreset, Message, MessageInput, ProviderType, to_messages
from conclave.providers import BaseProvider
from conclave.supervisor import SUPERVISOR_NAME, SupervisorAgent
from conclave.termination import Termination

logger = logging.getLogger(__name__)


class SupervisorAgency(BaseAgency):
    """
    Agency where a supervisor delegates to its members by name.

    Attributes:
        supervisor: The supervising agent, set by ``create()``
    """

    def __init__(
        self,
        agents: Optional[Iterable[Agent]] = None,
        max_delegation_depth: Optional[int] = None,
    ):
        super().__init__(agents, max_delegation_depth=max_delegation_depth)
        self.supervisor: Optional[SupervisorAgent] = None

    @classmethod
    def create(
        cls,
        agents: Iterable[Agent],
        custom_instructions: Optional[str] = None,
        name: str = SUPERVISOR_NAME,
        provider: Union[BaseProvider, ProviderType, str, None] = None,
        model: Optional[str] = None,
        termination: Optional[Termination] = None,
        config: Optional[ConclaveConfig] = None,
        max_delegation_depth: Optional[int] = None,
    ) -> "SupervisorAgency":
        """
        Build an agency and its supervisor in one step.

        Args:
            agents: The specialists the supervisor can delegate to
            custom_instructions: Extra instructions for the supervisor prompt
            name: Name of the supervisor agent
            provider: Provider for the supervisor (adapter or key)
            model: Model for the supervisor
            termination: Turn policy for the supervisor
            config: Shared configuration
            max_delegation_depth: Bound on nested delegation; defaults to
                                  ``config.max_delegation_depth``
        """
        if max_delegation_depth is None and config is not None:
            max_delegation_depth = config.max_delegation_depth

        agents = list(agents)
        agency = cls(agents=agents, max_delegation_depth=max_delegation_depth)
        agency.supervisor = SupervisorAgent(
            child_agents=agents,
            agency=agency,
            custom_instructions=custom_instructions,
            name=name,
            provider=provider,
            model=model,
            termination=termination,
            config=config,
        )
        logger.info(
            f"Created supervisor agency with agents: {[a.name for a in agents]}"
        )
        return agency

    @classmethod
    def from_preset(
        cls,
        agents: Iterable[Agent],
        preset: AgencyPreset,
        config: ConclaveConfig,
    ) -> "SupervisorAgency":
        return cls.create(agents, custom_instructions=preset.custom_instructions, config=config)

    async def chat(
        self,
        messages: MessageInput,
        on_text: Optional[TextSink] = None,
    ) -> list[Message]:
        """
        Hand the conversation to the supervisor.

        Raises:
            SupervisorNotSet: If the agency has no supervisor yet.
        """
        if self.supervisor is None:
            raise SupervisorNotSet("No supervisor set")

        return await self.supervisor.chat(to_messages(messages), on_text)
