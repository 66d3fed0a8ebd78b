"""
Termination Policies
====================

A termination policy decides whether an agent may start another turn.
The agent consults it *before* every provider call, so a history that
already satisfies the stop condition costs no API call at all.

Policies keep only their fixed configuration (a limit or a deadline) and
never change state between calls.

Available policies:
    - ``MaxMessages``: Continue while the history is shorter than a limit
    - ``Timeout``: Continue until a deadline passes
    - ``AllOf``: Continue only while every wrapped policy continues
"""

from __future__ import annotations

import abc
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from conclave.models import Message


class Termination(abc.ABC):
    """Abstract base class for termination policies."""

    @abc.abstractmethod
    def should_continue(self, messages: Sequence[Message]) -> bool:
        """
        Decide whether another turn may begin.

        Args:
            messages: The full conversation history so far, including any
                      system message and caller-supplied messages.
        """
        ...  # pragma: no cover


class MaxMessages(Termination):
    """Continue while the history holds fewer than ``max_messages`` entries."""

    def __init__(self, max_messages: int):
        self.max_messages = max_messages

    def should_continue(self, messages: Sequence[Message]) -> bool:
        return len(messages) < self.max_messages

    def __repr__(self) -> str:
        return f"MaxMessages({self.max_messages})"


class Timeout(Termination):
    """
    Continue until a fixed deadline.

    Args:
        end_time: The deadline. Defaults to ``seconds`` from construction.
        seconds: Offset used when no explicit deadline is given.
    """

    def __init__(self, end_time: Optional[datetime] = None, seconds: float = 60.0):
        if end_time is None:
            end_time = datetime.now(timezone.utc) + timedelta(seconds=seconds)
        self.end_time = end_time

    def should_continue(self, messages: Sequence[Message]) -> bool:
        return datetime.now(self.end_time.tzinfo) < self.end_time

    def __repr__(self) -> str:
        return f"Timeout(end_time={self.end_time.isoformat()})"


class AllOf(Termination):
    """Continue only while every wrapped policy allows it."""

    def __init__(self, *policies: Termination):
        self.policies = policies

    def should_continue(self, messages: Sequence[Message]) -> bool:
        return all(p.should_continue(messages) for p in self.policies)

    def __repr__(self) -> str:
        return f"AllOf{self.policies!r}"
