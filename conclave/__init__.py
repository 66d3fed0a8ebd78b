"""
Conclave: Multi-Agent Conversation Orchestration
=================================================

This package drives conversations between application callers and one or
more LLM providers. Agents wrap a provider, a system prompt and a set of
callable functions; agencies compose agents into supervisor-delegation or
sequential workflow topologies.

Main Components:
    - ``Agent``: Runs the turn loop against one provider
    - ``Function``: A model-invokable unit of host-side logic
    - ``SupervisorAgency`` / ``WorkflowAgency``: Agent compositions
    - ``ConclaveEngine``: Builds agencies from YAML presets
    - ``load_config``: Loads and validates YAML configuration

Quick Start:
    >>> from conclave import Agent, ConclaveConfig
    >>> config = ConclaveConfig(openai={"api_key": "sk-..."})
    >>> agent = Agent(name="Helper", system_message="Be brief.", config=config)
    >>> history = await agent.chat("Hello!", print)
"""

from conclave.agencies import BaseAgency, SupervisorAgency, WorkflowAgency
from conclave.agent import Agent
from conclave.config import ConclaveConfig, load_config, setup_logging
from conclave.delegation import DelegateFunction
from conclave.engine import ConclaveEngine
from conclave.errors import (
    AgencyNotSet,
    AgentNotFound,
    ConclaveError,
    ConfigurationError,
    DelegationDepthExceeded,
    FunctionNotFound,
    InvalidArguments,
    ProviderRequestError,
    SupervisorNotSet,
)
from conclave.function import Function
from conclave.models import (
    AgencyPreset,
    AgencyType,
    AgentConfig,
    FunctionCall,
    Message,
    ProviderType,
    Role,
)
from conclave.supervisor import SupervisorAgent
from conclave.termination import AllOf, MaxMessages, Termination, Timeout

__all__ = [
    "Agent",
    "AgencyNotSet",
    "AgencyPreset",
    "AgencyType",
    "AgentConfig",
    "AgentNotFound",
    "AllOf",
    "BaseAgency",
    "ConclaveConfig",
    "ConclaveEngine",
    "ConclaveError",
    "ConfigurationError",
    "DelegateFunction",
    "DelegationDepthExceeded",
    "Function",
    "FunctionCall",
    "FunctionNotFound",
    "InvalidArguments",
    "MaxMessages",
    "Message",
    "ProviderRequestError",
    "ProviderType",
    "Role",
    "SupervisorAgency",
    "SupervisorAgent",
    "SupervisorNotSet",
    "Termination",
    "Timeout",
    "WorkflowAgency",
    "load_config",
    "setup_logging",
]

__version__ = "1.0.0"
