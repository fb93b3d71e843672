"""ByName — wait for a window whose title matches, maximize it once."""

from __future__ import annotations

from maxlaunch.config import PollConfig
from maxlaunch.exceptions import WindowQueryError
from maxlaunch.logging import get_logger
from maxlaunch.maximize import MaximizeAction
from maxlaunch.strategies.base import AcquisitionStrategy, Outcome, StrategyResult, poll_cycles
from maxlaunch.windowing.base import WindowSystemQuery

log = get_logger(__name__)


class ByNameStrategy(AcquisitionStrategy):
    """Searching → Found → Done, or Searching → Exhausted.

    Exhaustion is not an error: the window may never appear, or the name
    may simply be wrong.
    """

    name = "by_name"

    def __init__(
        self,
        query: WindowSystemQuery,
        action: MaximizeAction,
        *,
        window_name: str,
        poll: PollConfig,
    ) -> None:
        super().__init__(query, action)
        self._window_name = window_name
        self._poll = poll

    async def _run(self) -> StrategyResult:
        cycles = 0
        async for cycle in poll_cycles(self._poll):
            cycles = cycle
            try:
                handle = await self._query.find_by_name(self._window_name)
            except WindowQueryError as exc:
                log.debug("cycle_query_failed", cycle=cycle, error=exc.message)
                continue

            if handle is None:
                log.debug("window_not_found", cycle=cycle, window_name=self._window_name)
                continue

            self._action.maximize(handle)
            log.info("window_maximized", handle=handle, cycle=cycle)
            return StrategyResult(self.name, Outcome.FOUND, cycles=cycle, handles=[handle])

        log.info("window_search_exhausted", window_name=self._window_name, cycles=cycles)
        return StrategyResult(self.name, Outcome.EXHAUSTED, cycles=cycles)
