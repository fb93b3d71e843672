"""Shared pytest fixtures for the maxlaunch test suite."""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Generator

import pytest

import maxlaunch.config as cfg_module
from maxlaunch.config import EngineConfig, ScreenRect, Settings, TargetSize, override_settings
from maxlaunch.exceptions import NoActiveWindowError, WindowQueryError
from maxlaunch.maximize import ActionDispatcher, MaximizeAction
from maxlaunch.screen import DisplayInfo, ScreenGeometry
from maxlaunch.windowing.base import (
    WindowController,
    WindowFlag,
    WindowHandle,
    WindowState,
    WindowSystemQuery,
)


# ---------------------------------------------------------------------------
# In-memory window system
# ---------------------------------------------------------------------------


class FakeWindowSystem(WindowSystemQuery, WindowController):
    """Window system that lives in a few dicts.

    ``on_query`` runs before every query with the method name and its call
    count, so a test can make windows appear at a given poll.
    """

    def __init__(self) -> None:
        self.titles: dict[WindowHandle, str] = {}
        self.viewable: set[WindowHandle] = set()
        self.active: WindowHandle | None = None
        # Consumed one entry per active_window() call when set.  None entries
        # mean "no active window"; exception instances are raised.
        self.active_script: list[WindowHandle | Exception | None] | None = None
        self.failing_state: dict[WindowHandle, int] = {}
        self.fail_queries: set[str] = set()
        self.on_query: Callable[[str, int], None] | None = None

        self.query_counts: Counter[str] = Counter()
        self.actions: list[tuple] = []

    def add_window(self, handle: WindowHandle, title: str = "", *, viewable: bool = True) -> None:
        self.titles[handle] = title
        if viewable:
            self.viewable.add(handle)

    def _query(self, method: str) -> None:
        self.query_counts[method] += 1
        if self.on_query is not None:
            self.on_query(method, self.query_counts[method])
        if method in self.fail_queries:
            raise WindowQueryError([method], "simulated failure")

    # -- WindowSystemQuery --------------------------------------------------

    async def list_windows(self) -> list[WindowHandle]:
        self._query("list_windows")
        return list(self.titles)

    async def window_state(self, handle: WindowHandle) -> WindowState:
        self._query("window_state")
        remaining = self.failing_state.get(handle, 0)
        if remaining:
            self.failing_state[handle] = remaining - 1
            raise WindowQueryError(["window_state", handle], "simulated failure")
        if handle not in self.titles:
            return WindowState.UNKNOWN
        return WindowState.VIEWABLE if handle in self.viewable else WindowState.NOT_VIEWABLE

    async def active_window(self) -> WindowHandle:
        self._query("active_window")
        if self.active_script is not None:
            if not self.active_script:
                raise NoActiveWindowError()
            entry = self.active_script.pop(0)
            if isinstance(entry, Exception):
                raise entry
            if entry is None:
                raise NoActiveWindowError()
            return entry
        if self.active is None:
            raise NoActiveWindowError()
        return self.active

    async def find_by_name(self, name: str) -> WindowHandle | None:
        self._query("find_by_name")
        for handle, title in self.titles.items():
            if name.lower() in title.lower():
                return handle
        return None

    # -- WindowController ---------------------------------------------------

    async def set_geometry(
        self, handle: WindowHandle, x: int, y: int, width: int, height: int
    ) -> None:
        self.actions.append(("set_geometry", handle, x, y, width, height))

    async def add_state(self, handle: WindowHandle, flag: WindowFlag) -> None:
        self.actions.append(("add_state", handle, flag))

    def actions_for(self, handle: WindowHandle) -> list[tuple]:
        return [a for a in self.actions if a[1] == handle]

    def maximized_handles(self) -> list[WindowHandle]:
        """Handles that received a geometry or fullscreen call, in order."""
        seen: list[WindowHandle] = []
        for action in self.actions:
            if action[0] == "set_geometry" or action[2] is WindowFlag.FULLSCREEN:
                if action[1] not in seen:
                    seen.append(action[1])
        return seen


class StaticScreenGeometry(ScreenGeometry):
    """Fixed display list; counts how often it was asked."""

    def __init__(self, displays: list[DisplayInfo]) -> None:
        self._displays = displays
        self.calls = 0

    def displays(self) -> list[DisplayInfo]:
        self.calls += 1
        return list(self._displays)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_ws() -> FakeWindowSystem:
    return FakeWindowSystem()


@pytest.fixture
def screen() -> ScreenRect:
    return ScreenRect(width=1920, height=1080)


@pytest.fixture
def engine() -> EngineConfig:
    return EngineConfig(active_poll_interval=0.001, terminate_timeout=1.0, drain_timeout=1.0)


@pytest.fixture
def dual_head() -> StaticScreenGeometry:
    return StaticScreenGeometry(
        [
            DisplayInfo("HDMI-1", 1920, 1080, 0, 0),
            DisplayInfo("DP-2", 2560, 1440, 1920, 0),
        ]
    )


@pytest.fixture
def make_action(
    fake_ws: FakeWindowSystem, screen: ScreenRect
) -> Callable[..., tuple[MaximizeAction, ActionDispatcher]]:
    """Build a ``MaximizeAction`` wired to ``fake_ws``."""

    def _make(
        target: TargetSize | None = None, *, force: bool = False, fullscreen: bool = False
    ) -> tuple[MaximizeAction, ActionDispatcher]:
        dispatcher = ActionDispatcher()
        action = MaximizeAction(
            fake_ws,
            dispatcher,
            screen=screen,
            target=target or TargetSize(width=screen.width, height=screen.height),
            force=force,
            fullscreen=fullscreen,
        )
        return action, dispatcher

    return _make


@pytest.fixture
def test_settings() -> Generator[Settings, None, None]:
    original = cfg_module._settings
    settings = Settings(
        logging={"level": "debug", "format": "console"},
        engine={"active_poll_interval": 0.001, "drain_timeout": 1.0, "terminate_timeout": 1.0},
    )
    override_settings(settings)
    yield settings
    cfg_module._settings = original
