"""AcquisitionStrategy — abstract base for the window acquisition loops.

A strategy runs as a single asyncio task.  Each cycle it queries the window
system, decides whether to act, and hands matches to ``MaximizeAction``.

Contract
--------
- ``run()`` returns a ``StrategyResult``; it never raises for a failed
  window-system query.  Implementations catch ``WindowQueryError`` per cycle
  and treat it as "no match this cycle".
- Bounded strategies iterate ``poll_cycles(poll)``, which yields at most
  ``max(max_cycles, 1)`` cycle numbers and sleeps ``cycle_delay`` between
  them (never after the last one).
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar

from maxlaunch.config import PollConfig
from maxlaunch.logging import bind_strategy_context, clear_strategy_context, get_logger
from maxlaunch.maximize import MaximizeAction
from maxlaunch.windowing.base import WindowHandle, WindowSystemQuery

log = get_logger(__name__)


class Outcome(str, Enum):
    FOUND = "found"
    EXHAUSTED = "exhausted"


@dataclass
class StrategyResult:
    strategy: str
    outcome: Outcome
    cycles: int = 0
    handles: list[WindowHandle] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.outcome is Outcome.FOUND


async def poll_cycles(poll: PollConfig) -> AsyncIterator[int]:
    """Yield cycle numbers ``1..poll.cycle_count``, sleeping between cycles."""
    for cycle in range(1, poll.cycle_count + 1):
        if cycle > 1:
            await asyncio.sleep(poll.cycle_delay)
        yield cycle


class AcquisitionStrategy(ABC):
    """Abstract base for all acquisition strategies."""

    name: ClassVar[str]

    def __init__(self, query: WindowSystemQuery, action: MaximizeAction) -> None:
        self._query = query
        self._action = action

    async def run(self) -> StrategyResult:
        """Run the loop to its terminal state."""
        bind_strategy_context(self.name)
        log.info("strategy_started")
        try:
            result = await self._run()
        finally:
            clear_strategy_context()
        log.info(
            "strategy_finished",
            strategy=self.name,
            outcome=result.outcome.value,
            cycles=result.cycles,
            handles=result.handles,
        )
        return result

    @abstractmethod
    async def _run(self) -> StrategyResult:
        """Main loop.  Must not let ``WindowQueryError`` escape."""
