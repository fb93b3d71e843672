"""Window system boundary — read-only query and write-only controller.

Implementations talk to the real window system (see ``windowing.x11``);
the engine only depends on these two abstract classes so that tests can run
against an in-memory window system.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum

WindowHandle = str
"""Window identifier, always in the ``0x%08x`` form produced by ``normalize_handle``."""


def normalize_handle(raw: str | int) -> WindowHandle:
    """Return *raw* as a zero-padded lowercase hex id.

    ``wmctrl`` prints ``0x04000003``, ``xwininfo`` prints ``0x4000003`` and
    ``xdotool`` prints ``67108867``; all three normalize to ``0x04000003``.

    Raises:
        ValueError: *raw* is not a window id.
    """
    if isinstance(raw, int):
        value = raw
    else:
        text = raw.strip().lower()
        value = int(text, 16) if text.startswith("0x") else int(text, 10)
    if value < 0:
        raise ValueError(f"Negative window id: {raw!r}")
    return f"0x{value:08x}"


class WindowState(str, Enum):
    VIEWABLE = "viewable"
    NOT_VIEWABLE = "not_viewable"
    UNKNOWN = "unknown"


class WindowFlag(str, Enum):
    """EWMH ``_NET_WM_STATE`` properties, spelled the way wmctrl expects them."""

    MAXIMIZED_HORZ = "maximized_horz"
    MAXIMIZED_VERT = "maximized_vert"
    FULLSCREEN = "fullscreen"


class WindowSystemQuery(ABC):
    """Read-only capability over the window system.

    Every method may raise ``WindowQueryError``; callers inside a polling
    loop treat that as "no match this cycle".
    """

    @abstractmethod
    async def list_windows(self) -> list[WindowHandle]:
        """All windows in the window tree, in enumeration order."""

    @abstractmethod
    async def window_state(self, handle: WindowHandle) -> WindowState:
        """Map/visibility state of *handle*."""

    @abstractmethod
    async def active_window(self) -> WindowHandle:
        """The focused window.  Raises ``NoActiveWindowError`` when there is none."""

    @abstractmethod
    async def find_by_name(self, name: str) -> WindowHandle | None:
        """First window whose title matches *name*, or None."""


class WindowController(ABC):
    """Write capability over the window system.  Best effort."""

    @abstractmethod
    async def set_geometry(
        self, handle: WindowHandle, x: int, y: int, width: int, height: int
    ) -> None:
        """Move and resize *handle*."""

    @abstractmethod
    async def add_state(self, handle: WindowHandle, flag: WindowFlag) -> None:
        """Add *flag* to the window's state."""
