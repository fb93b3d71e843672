"""ByViewableSet — maximize every window that becomes viewable.

The most intrusive strategy: it touches every viewable window on the
system, once each.  Meant as a fallback when the target can be identified
neither by name nor by focus changes.
"""

from __future__ import annotations

from collections.abc import Iterator

from maxlaunch.config import PollConfig
from maxlaunch.exceptions import WindowQueryError
from maxlaunch.logging import get_logger
from maxlaunch.maximize import MaximizeAction
from maxlaunch.strategies.base import AcquisitionStrategy, Outcome, StrategyResult, poll_cycles
from maxlaunch.windowing.base import WindowHandle, WindowState, WindowSystemQuery

log = get_logger(__name__)


class TrackedWindowSet:
    """Windows already acted upon during one run.  Only ever grows."""

    def __init__(self) -> None:
        self._members: set[WindowHandle] = set()
        self._order: list[WindowHandle] = []

    def add(self, handle: WindowHandle) -> bool:
        """Insert *handle*; return False if it was already tracked."""
        if handle in self._members:
            return False
        self._members.add(handle)
        self._order.append(handle)
        return True

    def __contains__(self, handle: object) -> bool:
        return handle in self._members

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[WindowHandle]:
        return iter(self._order)


class ByViewableSetStrategy(AcquisitionStrategy):
    name = "by_viewable_set"

    def __init__(
        self,
        query: WindowSystemQuery,
        action: MaximizeAction,
        *,
        poll: PollConfig,
    ) -> None:
        super().__init__(query, action)
        self._poll = poll

    async def _run(self) -> StrategyResult:
        tracked = TrackedWindowSet()
        cycles = 0

        async for cycle in poll_cycles(self._poll):
            cycles = cycle
            try:
                handles = await self._query.list_windows()
            except WindowQueryError as exc:
                log.debug("cycle_query_failed", cycle=cycle, error=exc.message)
                continue

            for handle in handles:
                if handle in tracked:
                    continue
                try:
                    state = await self._query.window_state(handle)
                except WindowQueryError as exc:
                    # Retried next cycle: the window is not tracked yet.
                    log.debug("window_state_failed", cycle=cycle, handle=handle, error=exc.message)
                    continue
                if state is not WindowState.VIEWABLE:
                    continue

                tracked.add(handle)
                self._action.maximize(handle)
                log.info("window_maximized", handle=handle, cycle=cycle)

        return StrategyResult(self.name, Outcome.EXHAUSTED, cycles=cycles, handles=list(tracked))
