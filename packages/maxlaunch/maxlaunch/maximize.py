"""Maximize decision logic and fire-and-forget action dispatch.

Given a window and the run's geometry, ``MaximizeAction`` decides which
controller calls to issue:

1. fullscreen requested → add ``FULLSCREEN``; nothing else
2. otherwise → centre the window at the target size
3. force requested → add ``MAXIMIZED_HORZ`` when the target width equals the
   screen width, ``MAXIMIZED_VERT`` when the heights match (independently)

The calls for one request run in order inside one detached task owned by the
``ActionDispatcher``; the polling loop never waits for them.  The runner
drains the dispatcher once the loop is over.
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any

from maxlaunch.config import ScreenRect, TargetSize
from maxlaunch.logging import get_logger
from maxlaunch.windowing.base import WindowController, WindowFlag, WindowHandle

log = get_logger(__name__)


@dataclass(frozen=True)
class MaximizeRequest:
    handle: WindowHandle
    screen: ScreenRect
    target: TargetSize
    force: bool = False
    fullscreen: bool = False


def centered_origin(screen: ScreenRect, target: TargetSize) -> tuple[int, int]:
    """Top-left corner that centres *target* on *screen* (floored)."""
    return (screen.width - target.width) // 2, (screen.height - target.height) // 2


def force_flags(req: MaximizeRequest) -> list[WindowFlag]:
    """State flags a forced maximize adds.  Empty unless ``req.force``."""
    if not req.force or req.fullscreen:
        return []
    flags: list[WindowFlag] = []
    if req.target.width == req.screen.width:
        flags.append(WindowFlag.MAXIMIZED_HORZ)
    if req.target.height == req.screen.height:
        flags.append(WindowFlag.MAXIMIZED_VERT)
    return flags


class ActionDispatcher:
    """Owns the detached window-action tasks.

    ``submit`` never blocks and never raises on behalf of the action; a failed
    action is logged.  ``drain`` is the single join point.
    """

    def __init__(self) -> None:
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def submit(
        self, coro: Coroutine[Any, Any, None], *, name: str | None = None
    ) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._pending.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[None]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.warning("window_action_failed", task=task.get_name(), error=str(exc))

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding actions; cancel whatever is left after *timeout*."""
        if not self._pending:
            return
        _, still_running = await asyncio.wait(set(self._pending), timeout=timeout)
        if still_running:
            for task in still_running:
                task.cancel()
            await asyncio.gather(*still_running, return_exceptions=True)
            log.warning("window_actions_abandoned", count=len(still_running))


class MaximizeAction:
    def __init__(
        self,
        controller: WindowController,
        dispatcher: ActionDispatcher,
        *,
        screen: ScreenRect,
        target: TargetSize,
        force: bool = False,
        fullscreen: bool = False,
    ) -> None:
        self._controller = controller
        self._dispatcher = dispatcher
        self._screen = screen
        self._target = target
        self._force = force
        self._fullscreen = fullscreen

    def request_for(self, handle: WindowHandle) -> MaximizeRequest:
        return MaximizeRequest(
            handle=handle,
            screen=self._screen,
            target=self._target,
            force=self._force,
            fullscreen=self._fullscreen,
        )

    def maximize(self, handle: WindowHandle) -> MaximizeRequest:
        """Build the run's request for *handle* and apply it."""
        req = self.request_for(handle)
        self.apply(req)
        return req

    def apply(self, req: MaximizeRequest) -> None:
        """Queue the controller calls for *req*.  Returns immediately."""
        self._dispatcher.submit(self._issue(req), name=f"maximize-{req.handle}")

    async def _issue(self, req: MaximizeRequest) -> None:
        if req.fullscreen:
            await self._controller.add_state(req.handle, WindowFlag.FULLSCREEN)
            log.info("window_fullscreened", handle=req.handle)
            return

        x, y = centered_origin(req.screen, req.target)
        await self._controller.set_geometry(req.handle, x, y, req.target.width, req.target.height)
        for flag in force_flags(req):
            await self._controller.add_state(req.handle, flag)
        log.info(
            "window_resized",
            handle=req.handle,
            x=x,
            y=y,
            width=req.target.width,
            height=req.target.height,
            forced=req.force,
        )
