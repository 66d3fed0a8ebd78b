"""
Workflow Agency
===============

Sequential processing where each agent continues the conversation the
previous agent produced. This is like an assembly line: a planner writes
an itinerary, a storyteller turns it into a story, and so on.

Each agent receives the *full* history returned by the agent before it.
Only the last agent streams to the caller; earlier agents run without a
sink and their partial output is discarded.
"""

from __future__ import annotations

import logging
from typing import Optional

from conclave.agencies.base import BaseAgency
from conclave.agent import TextSink
from conclave.models import Message, MessageInput, to_messages

logger = logging.getLogger(__name__)


class WorkflowAgency(BaseAgency):
    """Runs its agents in order, feeding each one the previous history."""

    async def chat(
        self,
        messages: MessageInput,
        on_text: Optional[TextSink] = None,
    ) -> list[Message]:
        history = to_messages(messages)
        if not self.agents:
            return history

        for step_num, agent in enumerate(self.agents, 1):
            is_last = step_num == len(self.agents)
            logger.debug(f"Workflow step {step_num}/{len(self.agents)}: {agent.name}")
            history = await agent.chat(history, on_text if is_last else None)

        return history
