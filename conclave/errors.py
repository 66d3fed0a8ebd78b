"""
Custom exception classes for Conclave.

Every error raised by the library derives from ``ConclaveError`` so that
callers can catch the whole family at once.
"""

from __future__ import annotations

from typing import Any, Optional


class ConclaveError(Exception):
    """Base class for all Conclave errors."""


class ConfigurationError(ConclaveError):
    """Missing or invalid configuration, e.g. an absent provider API key."""


class FunctionNotFound(ConclaveError):
    """
    Raised when a model asks for a function the agent does not expose.

    Attributes:
        name: The requested function name
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function {name} not found")


class InvalidArguments(ConclaveError):
    """Function arguments are missing or malformed."""


class AgentNotFound(ConclaveError):
    """
    Raised when delegation targets an agent that is not in the agency.

    Attributes:
        name: The requested agent name
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Agent {name} not found")


class AgencyNotSet(ConclaveError):
    """A delegation function was used without an agency bound to it."""


class SupervisorNotSet(ConclaveError):
    """A supervisor agency was asked to chat before it had a supervisor."""


class DelegationDepthExceeded(ConclaveError):
    """
    Raised when nested delegation goes deeper than the agency allows.

    Attributes:
        limit: The configured maximum delegation depth
    """

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"Delegation depth exceeded the limit of {limit}")


class ProviderRequestError(ConclaveError):
    """
    A provider API call failed at the transport level.

    Attributes:
        body: The raw error body returned by the provider, if any
        status_code: HTTP status code, if the failure carried one
    """

    def __init__(
        self,
        message: str,
        body: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        self.body = body
        self.status_code = status_code
        super().__init__(message)
