"""Screen geometry — the rectangle a window is fitted into.

``XrandrScreenGeometry`` reads ``xrandr --query``.  Every ``connected``
output with a current mode (``WxH+X+Y``) is an active display:

    HDMI-1 connected primary 1920x1080+0+0 (normal left inverted ...) 527mm x 296mm
    DP-2 connected 2560x1440+1920+0 (normal left inverted ...) 597mm x 336mm
    VGA-1 disconnected (normal left inverted right x axis y axis)

Without a display name the result is the bounding box of all active
displays (4480x1440 above).  With a name, that display's resolution.

Resolution runs once at startup, before the event loop exists, so this
module uses blocking ``subprocess.run``.
"""

from __future__ import annotations

import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass

from maxlaunch.config import ScreenRect
from maxlaunch.exceptions import DisplayNotFoundError
from maxlaunch.logging import get_logger

log = get_logger(__name__)

_CONNECTED_RE = re.compile(r"^(\S+) connected(?: primary)? (\d+)x(\d+)\+(-?\d+)\+(-?\d+)")


@dataclass(frozen=True)
class DisplayInfo:
    name: str
    width: int
    height: int
    x: int = 0
    y: int = 0


def parse_xrandr(output: str) -> list[DisplayInfo]:
    """Active displays listed by ``xrandr --query``."""
    displays: list[DisplayInfo] = []
    for line in output.splitlines():
        match = _CONNECTED_RE.match(line)
        if match:
            name, w, h, x, y = match.groups()
            displays.append(DisplayInfo(name=name, width=int(w), height=int(h), x=int(x), y=int(y)))
    return displays


def bounding_rect(displays: list[DisplayInfo]) -> ScreenRect:
    """Smallest rectangle covering every display."""
    if not displays:
        raise DisplayNotFoundError(None)
    left = min(d.x for d in displays)
    top = min(d.y for d in displays)
    right = max(d.x + d.width for d in displays)
    bottom = max(d.y + d.height for d in displays)
    return ScreenRect(width=right - left, height=bottom - top)


class ScreenGeometry(ABC):
    """Resolves the screen rectangle, optionally scoped to one display."""

    @abstractmethod
    def displays(self) -> list[DisplayInfo]:
        """Currently active displays."""

    def resolve(self, display: str | None = None) -> ScreenRect:
        """Return the bounding box of all displays, or *display*'s resolution.

        Raises:
            DisplayNotFoundError: *display* is not active, or no display is.
        """
        displays = self.displays()
        if display is None:
            rect = bounding_rect(displays)
            log.debug("screen_resolved", width=rect.width, height=rect.height)
            return rect

        for info in displays:
            if info.name == display:
                log.debug("screen_resolved", display=display, width=info.width, height=info.height)
                return ScreenRect(width=info.width, height=info.height)
        raise DisplayNotFoundError(display, [d.name for d in displays])


class XrandrScreenGeometry(ScreenGeometry):
    def __init__(self, xrandr: str = "xrandr", timeout: float = 5.0) -> None:
        self._xrandr = xrandr
        self._timeout = timeout

    def displays(self) -> list[DisplayInfo]:
        try:
            result = subprocess.run(
                [self._xrandr, "--query"],
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except (subprocess.TimeoutExpired, OSError) as exc:
            log.warning("xrandr_failed", error=str(exc))
            return []
        if result.returncode != 0:
            log.warning("xrandr_failed", status=result.returncode, stderr=result.stderr.strip())
            return []
        return parse_xrandr(result.stdout)
