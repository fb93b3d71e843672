"""ByActiveChangeCount — maximize the window that is active after N focus changes.

Useful for applications that show one or more splash windows before the
real one: each new window takes focus, so the Nth change lands on the
window that should be maximized.

The loop polls at a fixed interval and has no cycle bound.  Under
compositors that do not expose an active window it never sees a change
and waits until the process is killed.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from maxlaunch.exceptions import WindowQueryError
from maxlaunch.logging import get_logger
from maxlaunch.maximize import MaximizeAction
from maxlaunch.strategies.base import AcquisitionStrategy, Outcome, StrategyResult
from maxlaunch.windowing.base import WindowHandle, WindowSystemQuery

log = get_logger(__name__)


@dataclass
class ActiveChangeCounter:
    changes_seen: int = 0
    previous_handle: WindowHandle | None = None

    def observe(self, handle: WindowHandle) -> bool:
        """Record *handle*; return True when it differs from the previous one."""
        if handle == self.previous_handle:
            return False
        self.changes_seen += 1
        self.previous_handle = handle
        return True


class ByActiveChangeCountStrategy(AcquisitionStrategy):
    name = "by_active_change_count"

    def __init__(
        self,
        query: WindowSystemQuery,
        action: MaximizeAction,
        *,
        target_changes: int,
        poll_interval: float,
    ) -> None:
        super().__init__(query, action)
        if target_changes < 0:
            raise ValueError(f"target_changes must be >= 0, got {target_changes}")
        self._target_changes = target_changes
        self._poll_interval = poll_interval

    async def _read_active(self, cycle: int) -> WindowHandle | None:
        try:
            return await self._query.active_window()
        except WindowQueryError as exc:
            log.debug("cycle_query_failed", cycle=cycle, error=exc.message)
            return None

    async def _run(self) -> StrategyResult:
        counter = ActiveChangeCounter(previous_handle=await self._read_active(0))
        cycles = 0

        while counter.changes_seen < self._target_changes:
            await asyncio.sleep(self._poll_interval)
            cycles += 1
            handle = await self._read_active(cycles)
            if handle is not None and counter.observe(handle):
                log.debug(
                    "active_window_changed",
                    handle=handle,
                    changes_seen=counter.changes_seen,
                    target=self._target_changes,
                )

        handle = counter.previous_handle
        if handle is None:
            log.warning("no_active_window", cycles=cycles)
            return StrategyResult(self.name, Outcome.EXHAUSTED, cycles=cycles)

        self._action.maximize(handle)
        log.info("window_maximized", handle=handle, cycle=cycles)
        return StrategyResult(self.name, Outcome.FOUND, cycles=cycles, handles=[handle])
