"""Window system boundary: abstract query/controller plus the X11 adapters."""

from maxlaunch.windowing.base import (
    WindowController,
    WindowFlag,
    WindowHandle,
    WindowState,
    WindowSystemQuery,
    normalize_handle,
)
from maxlaunch.windowing.x11 import WmctrlController, X11WindowQuery

__all__ = [
    "WindowController",
    "WindowFlag",
    "WindowHandle",
    "WindowState",
    "WindowSystemQuery",
    "normalize_handle",
    "WmctrlController",
    "X11WindowQuery",
]
