"""
Configuration Loader
====================

Loads and validates the YAML configuration file that defines provider
credentials, default settings, agent definitions and agency presets.

The config file is the central place to:
    - Point each provider at its API key (or rely on the environment)
    - Pick the default provider and model for agents that don't set one
    - Define agents and group them into supervisor or workflow agencies
    - Bound how deep supervisors may delegate

The loaded ``ConclaveConfig`` is passed explicitly to agents, agencies and
the engine; there is no process-wide configuration object.

Usage:
    >>> from conclave.config import load_config
    >>> config = load_config("config.yaml")
    >>> config.agencies["travel"].name
    'Travel Desk'
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, PrivateAttr

from conclave.models import AgencyPreset, AgentConfig, ProviderType
from conclave.providers import BaseProvider, create_provider, resolve_provider_type

logger = logging.getLogger(__name__)

# Environment variables consulted when a provider has no key in the file
API_KEY_ENV_VARS: dict[ProviderType, str] = {
    ProviderType.OPENAI: "OPENAI_API_KEY",
    ProviderType.ANTHROPIC: "ANTHROPIC_API_KEY",
    ProviderType.GOOGLE: "GOOGLE_API_KEY",
}

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ProviderSettings(BaseModel):
    """
    Connection settings for one provider.

    Attributes:
        api_key: API key; adapters refuse to start without one
        base_url: Optional endpoint override (proxies, compatible servers)
        timeout: Request timeout in seconds
    """

    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout: float = 120.0


class DefaultsConfig(BaseModel):
    """
    Default parameters applied to agents unless overridden.

    Attributes:
        max_messages: Message cap of the default termination policy
        timeout_seconds: Deadline used by agents that ask for a timeout
        max_tokens: Token cap for providers that require one
        log_level: Level used by ``setup_logging()``
    """

    max_messages: int = 100
    timeout_seconds: float = 60.0
    max_tokens: int = 1024
    log_level: str = "INFO"


class ConclaveConfig(BaseModel):
    """
    Top-level configuration container.

    Attributes:
        openai: OpenAI connection settings
        anthropic: Anthropic connection settings
        google: Google (Gemini) connection settings
        default_provider: Provider used by agents that don't name one
        default_model: Model used by agents that don't name one; when unset
                       each provider's own default model applies
        max_delegation_depth: How many nested delegations a supervisor
                              agency allows. ``None`` leaves it unbounded.
        defaults: Default parameters for agents
        agents: Agent definitions (key -> AgentConfig)
        agencies: Agency presets (key -> AgencyPreset)
    """

    openai: ProviderSettings = Field(default_factory=ProviderSettings)
    anthropic: ProviderSettings = Field(default_factory=ProviderSettings)
    google: ProviderSettings = Field(default_factory=ProviderSettings)
    default_provider: ProviderType = ProviderType.OPENAI
    default_model: Optional[str] = None
    max_delegation_depth: Optional[int] = None
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    agents: dict[str, AgentConfig] = Field(default_factory=dict)
    agencies: dict[str, AgencyPreset] = Field(default_factory=dict)

    _clients: dict[ProviderType, BaseProvider] = PrivateAttr(default_factory=dict)

    def settings_for(self, provider: Union[ProviderType, str]) -> ProviderSettings:
        return getattr(self, resolve_provider_type(provider).value)

    def model_for(self, provider: Union[ProviderType, str, None] = None) -> Optional[str]:
        """``default_model`` if the provider is the default one, else ``None``."""
        provider_type = resolve_provider_type(provider or self.default_provider)
        return self.default_model if provider_type == self.default_provider else None

    def client_for(self, provider: Union[ProviderType, str, None] = None) -> BaseProvider:
        """
        Return the adapter for a provider, creating it on first use.

        Args:
            provider: Provider key; defaults to ``default_provider``.

        Raises:
            ConfigurationError: If the provider is unknown or has no API key.
        """
        provider_type = resolve_provider_type(provider or self.default_provider)
        if provider_type not in self._clients:
            settings = self.settings_for(provider_type)
            logger.debug(f"Creating {provider_type.value} provider")
            self._clients[provider_type] = create_provider(
                provider_type,
                api_key=settings.api_key,
                base_url=settings.base_url,
                timeout=settings.timeout,
                max_tokens=self.defaults.max_tokens,
            )
        return self._clients[provider_type]


def setup_logging(config: ConclaveConfig) -> None:
    """Configure the root logger for applications built on Conclave."""
    logging.basicConfig(
        level=getattr(logging, config.defaults.log_level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _parse_provider(raw: dict[str, Any], provider: ProviderType) -> ProviderSettings:
    settings = ProviderSettings(**(raw.get(provider.value) or {}))
    if not settings.api_key:
        settings.api_key = os.environ.get(API_KEY_ENV_VARS[provider])
    return settings


def load_config(config_path: str = "config.yaml") -> ConclaveConfig:
    """
    Load and validate the configuration from a YAML file.

    Provider keys missing from the file are read from ``OPENAI_API_KEY``,
    ``ANTHROPIC_API_KEY`` and ``GOOGLE_API_KEY``.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        A validated ``ConclaveConfig`` object.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the YAML is malformed.
        pydantic.ValidationError: If the config doesn't match the schema.
        ConfigurationError: If ``default_provider`` names no known provider.

    Example:
        >>> config = load_config("config.yaml")
        >>> config.default_provider
        <ProviderType.OPENAI: 'openai'>
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            f"Expected location: {config_file.absolute()}"
        )

    with open(config_file, "r") as f:
        raw = yaml.safe_load(f) or {}

    providers = {p.value: _parse_provider(raw, p) for p in ProviderType}

    # Agents are keyed in the file; the key doubles as the name when unset
    agents: dict[str, AgentConfig] = {}
    for key, agent_data in (raw.get("agents") or {}).items():
        agent_data = dict(agent_data or {})
        agent_data.setdefault("name", key)
        agents[key] = AgentConfig(**agent_data)

    agencies: dict[str, AgencyPreset] = {}
    for key, agency_data in (raw.get("agencies") or {}).items():
        agency_data = dict(agency_data or {})
        agency_data.setdefault("name", key)
        agencies[key] = AgencyPreset(**agency_data)

    defaults = DefaultsConfig(**(raw.get("defaults") or {}))

    return ConclaveConfig(
        **providers,
        default_provider=resolve_provider_type(raw.get("default_provider", ProviderType.OPENAI)),
        default_model=raw.get("default_model"),
        max_delegation_depth=raw.get("max_delegation_depth"),
        defaults=defaults,
        agents=agents,
        agencies=agencies,
    )
