"""
Provider Adapters
=================

Adapters that translate the canonical conversation model into each LLM
vendor's wire format.

Available providers:
    - ``OpenAIProvider``: OpenAI chat completions (inline ``function_call``)
    - ``AnthropicProvider``: Anthropic Messages (``tool_use`` blocks)
    - ``GoogleProvider``: Gemini via ``google-genai`` (function parts)
"""

from __future__ import annotations

from typing import Optional, Union

from conclave.errors import ConfigurationError
from conclave.models import ProviderType
from conclave.providers.anthropic_provider import AnthropicProvider
from conclave.providers.base import BaseProvider, ChatStream
from conclave.providers.google_provider import GoogleProvider
from conclave.providers.openai_provider import OpenAIProvider

# Maps provider types to their adapter classes
PROVIDER_MAP: dict[ProviderType, type[BaseProvider]] = {
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.ANTHROPIC: AnthropicProvider,
    ProviderType.GOOGLE: GoogleProvider,
}


def resolve_provider_type(provider: Union[ProviderType, str]) -> ProviderType:
    """
    Turn a provider key into a ``ProviderType``.

    Raises:
        ConfigurationError: If the key names no known provider.
    """
    try:
        return ProviderType(provider)
    except ValueError:
        raise ConfigurationError(
            f"Unknown provider: {provider}. "
            f"Available: {[p.value for p in PROVIDER_MAP]}"
        ) from None


def create_provider(
    provider: Union[ProviderType, str],
    api_key: Optional[str],
    base_url: Optional[str] = None,
    timeout: float = 120.0,
    max_tokens: int = 1024,
) -> BaseProvider:
    """
    Create the adapter for a provider.

    Raises:
        ConfigurationError: If the provider is unknown or the key is missing.
    """
    provider_class = PROVIDER_MAP[resolve_provider_type(provider)]
    return provider_class(
        api_key=api_key,
        base_url=base_url,
        timeout=timeout,
        max_tokens=max_tokens,
    )


__all__ = [
    "PROVIDER_MAP",
    "AnthropicProvider",
    "BaseProvider",
    "ChatStream",
    "GoogleProvider",
    "OpenAIProvider",
    "create_provider",
    "resolve_provider_type",
]
