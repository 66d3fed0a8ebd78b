"""
Supervisor Agent
================

A supervisor is an agent whose only function is ``delegate_to``. Its
system prompt lists every other agent in the agency with its
description, so the model knows whom it can hand work to.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Union

from conclave.agent import Agent
from conclave.config import ConclaveConfig
from conclave.delegation import DelegateFunction
from conclave.models import ProviderType
from conclave.providers import BaseProvider
from conclave.termination import Termination

if TYPE_CHECKING:
    from conclave.agencies.base import BaseAgency

SUPERVISOR_NAME = "Supervisor"
SUPERVISOR_DESCRIPTION = "A supervisor agent that coordinates between specialized agents"

SUPERVISOR_PROMPT = """You are a supervisor agent that coordinates between specialized agents.
Your role is to:
1. Understand the user's request
2. Choose the most appropriate agent to handle it
3. Delegate using the delegate_to function
4. Review the agent's response
5. Either return the response to the user or delegate to another agent

After receiving a response, you can either:
1. Return it to the user if it fully answers their request
2. Delegate to another agent if more work is needed
3. Add your own clarification or summary if needed"""


class SupervisorAgent(Agent):
    """
    Agent that coordinates peers through the ``delegate_to`` function.

    On construction the supervisor registers itself in the agency, so it
    can be found by name like any other member.

    Attributes:
        agency: The agency the supervisor delegates within
        custom_instructions: Extra instructions appended to the role prompt
    """

    def __init__(
        self,
        child_agents: Iterable[Agent],
        agency: "BaseAgency",
        custom_instructions: Optional[str] = None,
        name: str = SUPERVISOR_NAME,
        description: str = SUPERVISOR_DESCRIPTION,
        provider: Union[BaseProvider, ProviderType, str, None] = None,
        model: Optional[str] = None,
        termination: Optional[Termination] = None,
        config: Optional[ConclaveConfig] = None,
    ):
        self.agency = agency
        self.custom_instructions = custom_instructions
        super().__init__(
            name=name,
            description=description,
            system_message=self.build_system_message(child_agents, name, custom_instructions),
            functions=[DelegateFunction(self, agency)],
            provider=provider,
            model=model,
            termination=termination,
            config=config,
        )
        agency.register(self)

    @staticmethod
    def build_system_message(
        child_agents: Iterable[Agent],
        supervisor_name: str,
        custom_instructions: Optional[str] = None,
    ) -> str:
        agent_descriptions = "\n".join(
            f"- {agent.name}: {agent.description}"
            for agent in child_agents
            if agent.name != supervisor_name
        )

        sections = [SUPERVISOR_PROMPT]
        if custom_instructions:
            sections.append(custom_instructions)
        sections.append(f"Available agents:\n{agent_descriptions}")
        sections.append("Always use the delegate_to function to work with other agents.")
        return "\n\n".join(sections)
