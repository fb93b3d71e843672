"""maxlaunch — Exception hierarchy and exit codes.

All exceptions raised by the engine inherit from MaxLaunchError so that the
CLI can catch the full family with a single except clause and map each one
to its exit status.

Hierarchy:
    MaxLaunchError
    ├── ConfigurationError
    │   ├── MissingParameterError
    │   ├── InvalidParameterError
    │   ├── OrderingError
    │   ├── InvalidCommandError
    │   └── ConflictingCommandError
    ├── ExternalToolUnavailableError
    ├── DisplayNotFoundError
    └── WindowQueryError
        └── NoActiveWindowError

Everything except ``WindowQueryError`` is fatal and raised before polling
starts.  ``WindowQueryError`` is cycle-local: strategies catch it and treat
the cycle as "no match".
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ExitCode(IntEnum):
    OK = 0
    FAILURE = 1
    USAGE = 2  # reserved for the option parser
    MISSING_PARAMETER = 3
    INVALID_PARAMETER = 4
    INVALID_COMMAND = 5
    TRAILING_ARGUMENTS = 6
    TOOL_UNAVAILABLE = 7
    DISPLAY_NOT_FOUND = 8


class MaxLaunchError(Exception):
    """Base exception for all maxlaunch errors."""

    exit_code: ExitCode = ExitCode.FAILURE

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, context={self.context})"


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ConfigurationError(MaxLaunchError):
    """Base for all invalid-invocation errors.  Reported before polling begins."""

    exit_code = ExitCode.INVALID_PARAMETER


class MissingParameterError(ConfigurationError):
    """A required option was not supplied."""

    exit_code = ExitCode.MISSING_PARAMETER

    def __init__(self, parameter: str, hint: str = "") -> None:
        super().__init__(
            f"Missing required parameter: {parameter}" + (f" ({hint})" if hint else ""),
            context={"parameter": parameter},
        )
        self.parameter = parameter


class InvalidParameterError(ConfigurationError):
    """An option value is out of range or malformed."""

    def __init__(self, parameter: str, value: Any, reason: str) -> None:
        super().__init__(
            f"Invalid value for {parameter}: {value!r} ({reason})",
            context={"parameter": parameter, "value": value, "reason": reason},
        )
        self.parameter = parameter
        self.value = value


class OrderingError(ConfigurationError):
    """A display override was supplied after a width/height override."""

    def __init__(self, option: str, after: str) -> None:
        super().__init__(
            f"{option} must be given before {after}",
            context={"option": option, "after": after},
        )
        self.option = option
        self.after = after


class InvalidCommandError(ConfigurationError):
    """The application launch command cannot be parsed or executed."""

    exit_code = ExitCode.INVALID_COMMAND

    def __init__(self, command: str, reason: str) -> None:
        super().__init__(
            f"Invalid launch command {command!r}: {reason}",
            context={"command": command, "reason": reason},
        )
        self.command = command


class ConflictingCommandError(ConfigurationError):
    """Both ``--exec`` and trailing arguments were given."""

    exit_code = ExitCode.TRAILING_ARGUMENTS

    def __init__(self, trailing: list[str]) -> None:
        super().__init__(
            "Unexpected trailing arguments when --exec is set: " + " ".join(trailing),
            context={"trailing": trailing},
        )
        self.trailing = trailing


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------


class ExternalToolUnavailableError(MaxLaunchError):
    """A required window-system binary is missing or not executable."""

    exit_code = ExitCode.TOOL_UNAVAILABLE

    def __init__(self, tool: str, purpose: str = "") -> None:
        super().__init__(
            f"Required tool '{tool}' was not found on PATH"
            + (f" (needed for {purpose})" if purpose else ""),
            context={"tool": tool, "purpose": purpose},
        )
        self.tool = tool


class DisplayNotFoundError(MaxLaunchError):
    """The requested display does not match any active output."""

    exit_code = ExitCode.DISPLAY_NOT_FOUND

    def __init__(self, display: str | None, available: list[str] | None = None) -> None:
        available = available or []
        if display is None:
            message = "No active display found"
        else:
            message = f"Display '{display}' is not an active display"
            if available:
                message += f" (active: {', '.join(available)})"
        super().__init__(message, context={"display": display, "available": available})
        self.display = display
        self.available = available


# ---------------------------------------------------------------------------
# Window system queries (cycle-local, non-fatal)
# ---------------------------------------------------------------------------


class WindowQueryError(MaxLaunchError):
    """A window-system query failed.  Strategies treat this as "no match"."""

    def __init__(self, command: list[str], reason: str) -> None:
        super().__init__(
            f"Window query {' '.join(command)!r} failed: {reason}",
            context={"command": command, "reason": reason},
        )
        self.command = command
        self.reason = reason


class NoActiveWindowError(WindowQueryError):
    """The window system does not report an active window."""

    def __init__(self, reason: str = "no active window reported") -> None:
        super().__init__(["getactivewindow"], reason)
