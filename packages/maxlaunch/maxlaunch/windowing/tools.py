"""External window-system tools — lookup and invocation.

Every window-system interaction goes through one of four binaries:

    wmctrl    controller (geometry and state flags), window titles
    xrandr    display geometry
    xwininfo  window tree and map state      (viewable-set strategy)
    xdotool   active window                  (active-change strategy)

``resolve_tools`` checks at startup that the binaries the run needs exist;
``run_tool`` executes one of them asynchronously with a timeout.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass

from maxlaunch.config import StrategyKind, ToolConfig
from maxlaunch.exceptions import ExternalToolUnavailableError, WindowQueryError
from maxlaunch.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ResolvedTools:
    """Absolute paths of the tools available to this run."""

    wmctrl: str
    xrandr: str
    xwininfo: str | None = None
    xdotool: str | None = None


def require_tool(name: str, purpose: str = "") -> str:
    """Return the absolute path of *name* or raise ``ExternalToolUnavailableError``."""
    path = shutil.which(name)
    if path is None:
        raise ExternalToolUnavailableError(name, purpose)
    return path


def resolve_tools(tools: ToolConfig, strategy: StrategyKind | None = None) -> ResolvedTools:
    """Resolve the tools needed for *strategy*.

    ``wmctrl`` and ``xrandr`` are always required.  With ``strategy=None``
    only those two are checked.
    """
    wmctrl = require_tool(tools.wmctrl, "window geometry and state")
    xrandr = require_tool(tools.xrandr, "display resolution")
    xwininfo = None
    xdotool = None
    if strategy is StrategyKind.BY_VIEWABLE_SET:
        xwininfo = require_tool(tools.xwininfo, "window enumeration")
    elif strategy is StrategyKind.BY_ACTIVE_CHANGE_COUNT:
        xdotool = require_tool(tools.xdotool, "active window detection")
    return ResolvedTools(wmctrl=wmctrl, xrandr=xrandr, xwininfo=xwininfo, xdotool=xdotool)


async def run_tool(argv: list[str], timeout: float = 5.0) -> str:
    """Run *argv* and return its stdout.

    Raises:
        WindowQueryError: the process could not start, timed out, or exited
            with a non-zero status.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise WindowQueryError(argv, str(exc)) from exc

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.communicate()
        raise WindowQueryError(argv, f"timed out after {timeout}s")

    if proc.returncode != 0:
        stderr = stderr_bytes.decode(errors="replace").strip() if stderr_bytes else ""
        raise WindowQueryError(argv, stderr or f"exit status {proc.returncode}")

    log.debug("tool_ran", argv=argv)
    return stdout_bytes.decode(errors="replace") if stdout_bytes else ""
