"""
Delegation
==========

The ``delegate_to`` function lets a supervising agent hand a sub-task to
a peer agent through ordinary function calling. The model picks a peer
by name; the function runs a fresh, one-shot conversation with that peer
and returns the peer's final answer as the function result.

Delegation recurses: a peer may itself be a supervisor. The current depth
is tracked per task in a context variable so that an agency can bound it
with ``max_delegation_depth``.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, Optional

from conclave.errors import AgencyNotSet, AgentNotFound, DelegationDepthExceeded
from conclave.function import Function
from conclave.models import Message

if TYPE_CHECKING:
    from conclave.agencies.base import BaseAgency
    from conclave.agent import Agent

logger = logging.getLogger(__name__)

SELF_DELEGATION_ERROR = "Cannot delegate to self"

_delegation_depth: ContextVar[int] = ContextVar("conclave_delegation_depth", default=0)


def current_delegation_depth() -> int:
    """How many delegations deep the running task currently is."""
    return _delegation_depth.get()


class DelegateFunction(Function):
    """
    Function that routes a task from a supervisor to a peer agent.

    Attributes:
        agent: The supervising agent this function belongs to
        agency: The agency whose agents can be delegated to
    """

    def __init__(self, agent: "Agent", agency: Optional["BaseAgency"]):
        if agent is None:
            raise ValueError("Agent must not be None")

        super().__init__(
            name="delegate_to",
            description="Delegate a task to a specialized agent",
            parameters={
                "type": "object",
                "properties": {
                    "agent_name": {
                        "type": "string",
                        "description": "The name of the agent to delegate to",
                    },
                    "message": {
                        "type": "string",
                        "description": "The instructions for the agent being delegated to",
                    },
                },
                "required": ["agent_name", "message"],
            },
        )
        self.agent = agent
        self.agency = agency

    async def perform(self, agent_name: str, message: str) -> dict[str, Any]:
        """
        Run a one-shot conversation with the named peer.

        Returns:
            ``{"response": <final message content or None>}``, or
            ``{"error": "Cannot delegate to self"}`` when the supervisor
            names itself.

        Raises:
            AgencyNotSet: If no agency is bound.
            AgentNotFound: If no agent in the agency has that name.
            DelegationDepthExceeded: If the agency's depth limit is reached.
        """
        if self.agency is None:
            raise AgencyNotSet("Agency not set")

        if agent_name == self.agent.name:
            return {"error": SELF_DELEGATION_ERROR}

        peer = self.agency.find_agent(agent_name)
        if peer is None:
            raise AgentNotFound(agent_name)

        depth = _delegation_depth.get()
        limit = self.agency.max_delegation_depth
        if limit is not None and depth >= limit:
            raise DelegationDepthExceeded(limit)

        logger.info(f"Delegating to {agent_name}: {message}")
        token = _delegation_depth.set(depth + 1)
        try:
            history = await peer.chat([Message.user(message)])
        finally:
            _delegation_depth.reset(token)

        last_message = history[-1] if history else None
        return {"response": (last_message.content or None) if last_message else None}
