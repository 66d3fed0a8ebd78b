"""
Agencies
========

Composition strategies that define how agents collaborate on a conversation.

Available agencies:
    - ``SupervisorAgency``: A supervisor delegates to members by name
    - ``WorkflowAgency``: Agents run in sequence, each continuing the history
"""

from conclave.agencies.base import BaseAgency
from conclave.agencies.supervisor import SupervisorAgency
from conclave.agencies.workflow import WorkflowAgency

__all__ = [
    "BaseAgency",
    "SupervisorAgency",
    "WorkflowAgency",
]
