"""Staggered, cancellable reveal of agent labels."""

import asyncio
from typing import Callable, Iterable

from atlas.agents import Agent

RevealCallback = Callable[[Agent, int], None]


class AgentRevealScheduler:
    """Schedules one callback per agent at a fixed interval.

    Each callback carries the epoch of the turn that scheduled it; the receiver
    is expected to drop callbacks whose epoch is no longer current.
    """

    def __init__(self, interval: float, on_reveal: RevealCallback):
        """Initialize scheduler.

        Args:
            interval: Seconds between consecutive reveals
            on_reveal: Called with (agent, epoch) when a reveal fires
        """
        self.interval = interval
        self.on_reveal = on_reveal
        self._handles: list[asyncio.TimerHandle] = []

    def schedule(self, agents: Iterable[Agent], epoch: int) -> None:
        """Schedule the reveal of ``agents`` in order. Must run inside the event loop."""
        loop = asyncio.get_running_loop()
        for index, agent in enumerate(agents):
            handle = loop.call_later((index + 1) * self.interval, self.on_reveal, agent, epoch)
            self._handles.append(handle)

    def cancel(self) -> None:
        """Cancel every reveal that has not fired yet."""
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
