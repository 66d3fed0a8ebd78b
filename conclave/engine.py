"""
Conclave Engine
===============

Builds agents and agencies from configuration presets. The engine:
    1. Reads agent definitions and agency presets from the configuration
    2. Creates Agent objects with their providers, functions and policies
    3. Selects the agency topology (supervisor/workflow)
    4. Runs a conversation through a freshly built agency

Host functions are registered on the engine by name, so that YAML agent
definitions can refer to them.

Usage:
    >>> from conclave import ConclaveEngine, load_config
    >>> config = load_config("config.yaml")
    >>> engine = ConclaveEngine(config, functions={"get_weather": weather})
    >>> history = await engine.chat("travel", "Plan a weekend in Lisbon", print)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from conclave.agencies import BaseAgency, SupervisorAgency, WorkflowAgency
from conclave.agent import Agent, TextSink
from conclave.config import ConclaveConfig
from conclave.errors import FunctionNotFound
from conclave.function import Function
from conclave.models import AgencyPreset, AgencyType, AgentConfig, Message, MessageInput
from conclave.termination import AllOf, MaxMessages, Termination, Timeout

logger = logging.getLogger(__name__)

# Maps agency types to their implementation classes
AGENCY_MAP: dict[AgencyType, type[BaseAgency]] = {
    AgencyType.SUPERVISOR: SupervisorAgency,
    AgencyType.WORKFLOW: WorkflowAgency,
}


class ConclaveEngine:
    """
    Creates agents and agencies from a ``ConclaveConfig``.

    Attributes:
        config: The loaded configuration
        functions: Host functions available to configured agents, by name
    """

    def __init__(
        self,
        config: ConclaveConfig,
        functions: Optional[dict[str, Function]] = None,
    ):
        self.config = config
        self.functions: dict[str, Function] = dict(functions or {})

    def register_function(self, function: Function) -> None:
        self.functions[function.name] = function

    # =========================================================================
    # Construction
    # =========================================================================

    def _create_termination(self, agent_config: AgentConfig) -> Termination:
        max_messages = MaxMessages(
            agent_config.max_messages or self.config.defaults.max_messages
        )
        if agent_config.timeout_seconds is None:
            return max_messages
        return AllOf(max_messages, Timeout(seconds=agent_config.timeout_seconds))

    def _resolve_functions(self, agent_config: AgentConfig) -> list[Function]:
        resolved = []
        for name in agent_config.functions:
            if name not in self.functions:
                raise FunctionNotFound(name)
            resolved.append(self.functions[name])
        return resolved

    def create_agent(self, agent_key: str) -> Agent:
        """
        Create an Agent from its configuration entry.

        Raises:
            KeyError: If the agent key is not in the configuration.
            FunctionNotFound: If the agent names an unregistered function.
        """
        if agent_key not in self.config.agents:
            raise KeyError(
                f"Agent '{agent_key}' not found in configuration. "
                f"Available agents: {list(self.config.agents.keys())}"
            )
        ac = self.config.agents[agent_key]
        return Agent(
            name=ac.name,
            description=ac.description,
            system_message=ac.system_message,
            functions=self._resolve_functions(ac),
            provider=ac.provider,
            model=ac.model,
            termination=self._create_termination(ac),
            config=self.config,
        )

    def create_agency(self, agency_key: str) -> BaseAgency:
        """
        Create a fresh agency (and its agents) from a preset.

        Raises:
            KeyError: If the preset or one of its agents is not configured.
            ValueError: If the preset's type is unknown.
        """
        if agency_key not in self.config.agencies:
            raise KeyError(
                f"Agency '{agency_key}' not found in configuration. "
                f"Available: {list(self.config.agencies.keys())}"
            )
        preset: AgencyPreset = self.config.agencies[agency_key]
        agents = [self.create_agent(key) for key in preset.agents]

        agency_class = AGENCY_MAP.get(preset.type)
        if agency_class is None:
            raise ValueError(
                f"Unknown agency type '{preset.type}'. "
                f"Available: {list(AGENCY_MAP.keys())}"
            )

        return agency_class.from_preset(agents, preset, self.config)

    # =========================================================================
    # Running
    # =========================================================================

    async def chat(
        self,
        agency_key: str,
        messages: MessageInput,
        on_text: Optional[TextSink] = None,
    ) -> list[Message]:
        """
        Run one conversation through a freshly built agency.

        Args:
            agency_key: Key of the agency preset (e.g., "travel")
            messages: The user's request or a prior conversation
            on_text: Optional sink for streamed text

        Returns:
            The resulting conversation history.
        """
        agency = self.create_agency(agency_key)
        preset = self.config.agencies[agency_key]
        logger.info(f"Starting {preset.name} ({preset.type.value} agency)")
        return await agency.chat(messages, on_text)

    def get_available_agencies(self) -> dict[str, dict[str, Any]]:
        """
        Summarize the configured agency presets.

        Example:
            >>> for key, info in engine.get_available_agencies().items():
            ...     print(f"{info['name']}: {info['description']}")
        """
        result = {}
        for key, preset in self.config.agencies.items():
            result[key] = {
                "name": preset.name,
                "description": preset.description,
                "type": preset.type.value,
                "agents": list(preset.agents),
            }
        return result

    def get_available_agents(self) -> dict[str, dict[str, Any]]:
        result = {}
        for key, ac in self.config.agents.items():
            result[key] = {
                "name": ac.name,
                "description": ac.description,
                "provider": (ac.provider or self.config.default_provider).value,
                "model": ac.model or self.config.model_for(ac.provider),
                "functions": list(ac.functions),
            }
        return result
