"""X11 implementation of the window system boundary.

Implementation:
  - window tree:   ``xwininfo -root -tree``
  - map state:     ``xwininfo -id <id>``  ("Map State: IsViewable")
  - active window: ``xdotool getactivewindow``
  - find by name:  ``wmctrl -l`` (case-insensitive substring of the title)
  - geometry:      ``wmctrl -i -r <id> -e 0,x,y,w,h``
  - state flags:   ``wmctrl -i -r <id> -b add,<flag>``
"""

from __future__ import annotations

import re

from maxlaunch.exceptions import NoActiveWindowError, WindowQueryError
from maxlaunch.logging import get_logger
from maxlaunch.windowing.base import (
    WindowController,
    WindowFlag,
    WindowHandle,
    WindowState,
    WindowSystemQuery,
    normalize_handle,
)
from maxlaunch.windowing.tools import run_tool

log = get_logger(__name__)

_TREE_LINE_RE = re.compile(r"^\s*(0x[0-9a-fA-F]+)\s")
_MAP_STATE_RE = re.compile(r"Map State:\s*(\w+)")

_MAP_STATES = {
    "IsViewable": WindowState.VIEWABLE,
    "IsUnMapped": WindowState.NOT_VIEWABLE,
    "IsUnviewable": WindowState.NOT_VIEWABLE,
}


# ---------------------------------------------------------------------------
# Output parsers
# ---------------------------------------------------------------------------


def parse_window_tree(output: str) -> list[WindowHandle]:
    """Extract window ids from ``xwininfo -root -tree`` in enumeration order."""
    handles: list[WindowHandle] = []
    seen: set[WindowHandle] = set()
    for line in output.splitlines():
        match = _TREE_LINE_RE.match(line)
        if not match:
            continue
        handle = normalize_handle(match.group(1))
        if handle not in seen:
            seen.add(handle)
            handles.append(handle)
    return handles


def parse_map_state(output: str) -> WindowState:
    match = _MAP_STATE_RE.search(output)
    if not match:
        return WindowState.UNKNOWN
    return _MAP_STATES.get(match.group(1), WindowState.UNKNOWN)


def parse_wmctrl_list(output: str) -> list[tuple[WindowHandle, str]]:
    """Parse ``wmctrl -l`` into ``(handle, title)`` pairs."""
    windows: list[tuple[WindowHandle, str]] = []
    for line in output.splitlines():
        parts = line.split(None, 3)
        if len(parts) < 3:
            continue
        try:
            handle = normalize_handle(parts[0])
        except ValueError:
            continue
        title = parts[3] if len(parts) > 3 else ""
        windows.append((handle, title))
    return windows


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


class X11WindowQuery(WindowSystemQuery):
    def __init__(
        self,
        *,
        wmctrl: str,
        xwininfo: str | None = None,
        xdotool: str | None = None,
        timeout: float = 5.0,
    ) -> None:
        self._wmctrl = wmctrl
        self._xwininfo = xwininfo
        self._xdotool = xdotool
        self._timeout = timeout

    async def list_windows(self) -> list[WindowHandle]:
        if self._xwininfo is None:
            raise WindowQueryError(["xwininfo", "-root", "-tree"], "xwininfo not configured")
        out = await run_tool([self._xwininfo, "-root", "-tree"], self._timeout)
        return parse_window_tree(out)

    async def window_state(self, handle: WindowHandle) -> WindowState:
        if self._xwininfo is None:
            raise WindowQueryError(["xwininfo", "-id", handle], "xwininfo not configured")
        out = await run_tool([self._xwininfo, "-id", handle], self._timeout)
        return parse_map_state(out)

    async def active_window(self) -> WindowHandle:
        if self._xdotool is None:
            raise NoActiveWindowError("xdotool not configured")
        try:
            out = await run_tool([self._xdotool, "getactivewindow"], self._timeout)
        except WindowQueryError as exc:
            raise NoActiveWindowError(exc.reason) from exc

        raw = out.strip()
        if not raw:
            raise NoActiveWindowError()
        try:
            handle = normalize_handle(raw)
        except ValueError as exc:
            raise NoActiveWindowError(f"unexpected output {raw!r}") from exc
        if int(handle, 16) == 0:
            raise NoActiveWindowError()
        return handle

    async def find_by_name(self, name: str) -> WindowHandle | None:
        out = await run_tool([self._wmctrl, "-l"], self._timeout)
        needle = name.lower()
        for handle, title in parse_wmctrl_list(out):
            if needle in title.lower():
                return handle
        return None


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class WmctrlController(WindowController):
    def __init__(self, *, wmctrl: str, timeout: float = 5.0) -> None:
        self._wmctrl = wmctrl
        self._timeout = timeout

    async def set_geometry(
        self, handle: WindowHandle, x: int, y: int, width: int, height: int
    ) -> None:
        await run_tool(
            [self._wmctrl, "-i", "-r", handle, "-e", f"0,{x},{y},{width},{height}"],
            self._timeout,
        )
        log.debug("geometry_set", handle=handle, x=x, y=y, width=width, height=height)

    async def add_state(self, handle: WindowHandle, flag: WindowFlag) -> None:
        await run_tool(
            [self._wmctrl, "-i", "-r", handle, "-b", f"add,{flag.value}"],
            self._timeout,
        )
        log.debug("state_added", handle=handle, flag=flag.value)
