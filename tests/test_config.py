"""Tests for YAML configuration loading."""

import logging
import textwrap

import pytest

from conclave.config import ConclaveConfig, ProviderSettings, load_config, setup_logging
from conclave.errors import ConfigurationError
from conclave.models import AgencyType, ProviderType
from conclave.providers import AnthropicProvider, OpenAIProvider


CONFIG_YAML = textwrap.dedent("""
    openai:
      api_key: sk-from-file
      timeout: 30
    default_provider: openai
    default_model: gpt-4o-mini
    max_delegation_depth: 3

    defaults:
      max_messages: 40
      log_level: DEBUG

    agents:
      travel_agent:
        name: TravelAgent
        description: Agent for planning trips
        system_message: You are a travel agent.
      storyteller:
        description: Tells stories
        provider: anthropic
        functions: [get_weather]

    agencies:
      travel_story:
        name: Travel Story
        type: workflow
        agents: [travel_agent, storyteller]
      travel_desk:
        type: supervisor
        agents: [travel_agent]
        custom_instructions: Keep it brief.
""")


@pytest.fixture
def clean_env(monkeypatch):
    for var in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY"):
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    return path


class TestLoadConfig:
    def test_loads_providers_and_defaults(self, clean_env, config_file):
        config = load_config(str(config_file))

        assert config.openai.api_key == "sk-from-file"
        assert config.openai.timeout == 30
        assert config.default_provider == ProviderType.OPENAI
        assert config.default_model == "gpt-4o-mini"
        assert config.max_delegation_depth == 3
        assert config.defaults.max_messages == 40
        assert config.defaults.max_tokens == 1024

    def test_loads_agents_and_agencies(self, clean_env, config_file):
        config = load_config(str(config_file))

        assert config.agents["travel_agent"].name == "TravelAgent"
        assert config.agents["storyteller"].name == "storyteller"
        assert config.agents["storyteller"].provider == ProviderType.ANTHROPIC
        assert config.agents["storyteller"].functions == ["get_weather"]
        assert config.agencies["travel_story"].type == AgencyType.WORKFLOW
        assert config.agencies["travel_desk"].name == "travel_desk"
        assert config.agencies["travel_desk"].custom_instructions == "Keep it brief."

    def test_missing_keys_come_from_environment(self, clean_env, config_file):
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-ant-env")
        clean_env.setenv("OPENAI_API_KEY", "sk-env")

        config = load_config(str(config_file))

        assert config.anthropic.api_key == "sk-ant-env"
        assert config.openai.api_key == "sk-from-file"
        assert config.google.api_key is None

    def test_empty_file_gives_defaults(self, clean_env, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_config(str(path))

        assert config.default_provider == ProviderType.OPENAI
        assert config.max_delegation_depth is None
        assert config.defaults.max_messages == 100
        assert config.agents == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_unknown_default_provider(self, clean_env, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("default_provider: mistral\n")

        with pytest.raises(ConfigurationError, match="mistral"):
            load_config(str(path))


class TestClientFor:
    def test_creates_and_caches_adapters(self):
        config = ConclaveConfig(
            openai=ProviderSettings(api_key="sk-test"),
            anthropic=ProviderSettings(api_key="sk-ant-test"),
        )

        first = config.client_for()
        assert isinstance(first, OpenAIProvider)
        assert config.client_for("openai") is first
        assert isinstance(config.client_for(ProviderType.ANTHROPIC), AnthropicProvider)

    def test_missing_key_is_a_configuration_error(self):
        with pytest.raises(ConfigurationError):
            ConclaveConfig().client_for(ProviderType.GOOGLE)

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError, match="Unknown provider"):
            ConclaveConfig().client_for("mistral")


def test_setup_logging_uses_configured_level(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    setup_logging(ConclaveConfig(defaults={"log_level": "debug"}))

    assert calls["level"] == logging.DEBUG
