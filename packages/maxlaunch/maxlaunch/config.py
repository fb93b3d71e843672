"""maxlaunch — Configuration.

Two layers:

1. ``Settings`` — ambient tool settings (logging, tool names, timing
   defaults), loaded from environment variables prefixed with
   ``MAXLAUNCH_``.  There are no configuration files.

2. ``RunConfig`` — the immutable description of one run (strategy, polling
   bounds, geometry, launch command).  Built once by ``RunConfigBuilder``
   from the command line and passed explicitly to every component.

Example::

    MAXLAUNCH_LOGGING__LEVEL=debug MAXLAUNCH_ENGINE__ACTIVE_POLL_INTERVAL=0.1 \\
        maxlaunch --active-changes 2 -- firefox
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Annotated, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveInt,
    ValidationError,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from maxlaunch.exceptions import (
    InvalidParameterError,
    MissingParameterError,
    OrderingError,
)

if TYPE_CHECKING:
    from maxlaunch.screen import ScreenGeometry


# ---------------------------------------------------------------------------
# Ambient settings
# ---------------------------------------------------------------------------


class LoggingConfig(BaseModel):
    level: Literal["debug", "info", "warning", "error", "critical"] = "warning"
    format: Literal["json", "console"] = "console"


class ToolConfig(BaseModel):
    wmctrl: str = Field(default="wmctrl", description="Window controller binary.")
    xdotool: str = Field(default="xdotool", description="Used to read the active window.")
    xwininfo: str = Field(default="xwininfo", description="Used to enumerate windows.")
    xrandr: str = Field(default="xrandr", description="Used to read display geometry.")
    command_timeout: Annotated[float, Field(gt=0, le=60)] = Field(
        default=5.0,
        description="Seconds before a window-system query is abandoned.",
    )


class EngineConfig(BaseModel):
    default_cycles: Annotated[int, Field(ge=0)] = 20
    default_delay: Annotated[float, Field(ge=0)] = 0.5
    active_poll_interval: Annotated[float, Field(gt=0, le=10)] = Field(
        default=0.2,
        description=(
            "Fixed interval between active-window checks.  Independent of "
            "--delay, which only applies to the bounded strategies."
        ),
    )
    terminate_timeout: Annotated[float, Field(gt=0)] = Field(
        default=5.0,
        description="Seconds to wait after SIGTERM before killing the launched process.",
    )
    drain_timeout: Annotated[float, Field(ge=0)] = Field(
        default=2.0,
        description="Seconds to wait for in-flight window actions when the loop ends.",
    )


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MAXLAUNCH_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    tools: ToolConfig = Field(default_factory=ToolConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls()


# Module-level singleton, created on first use by ``get_settings()``.
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def override_settings(settings: Settings) -> None:
    """Replace the module-level singleton. Used in tests."""
    global _settings
    _settings = settings


# ---------------------------------------------------------------------------
# Run configuration
# ---------------------------------------------------------------------------


class StrategyKind(str, Enum):
    BY_NAME = "by_name"
    BY_ACTIVE_CHANGE_COUNT = "by_active_change_count"
    BY_VIEWABLE_SET = "by_viewable_set"


class ScreenRect(BaseModel):
    """Rectangle the window is fitted into."""

    model_config = ConfigDict(frozen=True)

    width: PositiveInt
    height: PositiveInt


class TargetSize(BaseModel):
    """Requested window size.  Defaults to the screen size."""

    model_config = ConfigDict(frozen=True)

    width: PositiveInt
    height: PositiveInt


class PollConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_cycles: NonNegativeInt = 20
    cycle_delay: NonNegativeFloat = 0.5

    @property
    def cycle_count(self) -> int:
        """Number of cycles actually run.  ``max_cycles=0`` still runs one."""
        return max(self.max_cycles, 1)


class RunConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy: StrategyKind
    window_name: str | None = None
    active_changes: NonNegativeInt | None = None
    poll: PollConfig = Field(default_factory=PollConfig)
    screen: ScreenRect
    target: TargetSize
    force: bool = False
    fullscreen: bool = False
    command: tuple[str, ...] | None = None


def _invalid_from_validation(exc: ValidationError) -> InvalidParameterError:
    first = exc.errors()[0]
    name = ".".join(str(part) for part in first.get("loc", ())) or "configuration"
    return InvalidParameterError(name, first.get("input"), first.get("msg", "invalid"))


class RunConfigBuilder:
    """Assembles a ``RunConfig`` from overrides applied in command-line order.

    The screen rectangle must be known before size overrides are applied:
    ``use_display()`` after ``set_width()``/``set_height()`` raises
    ``OrderingError``.  Without a display the default screen is resolved on
    first use.

    Usage::

        builder = RunConfigBuilder(XrandrScreenGeometry(...))
        builder.use_display("HDMI-1").set_width(1280)
        config = builder.build(window_name="Firefox")
    """

    def __init__(self, geometry: "ScreenGeometry") -> None:
        self._geometry = geometry
        self._screen: ScreenRect | None = None
        self._display: str | None = None
        self._width: int | None = None
        self._height: int | None = None

    @property
    def display(self) -> str | None:
        return self._display

    @property
    def screen(self) -> ScreenRect:
        if self._screen is None:
            self._screen = self._geometry.resolve(None)
        return self._screen

    def use_display(self, display: str) -> "RunConfigBuilder":
        if self._width is not None or self._height is not None:
            raise OrderingError("--display", "--width/--height")
        self._display = display
        self._screen = self._geometry.resolve(display)
        return self

    def set_width(self, width: int) -> "RunConfigBuilder":
        if width <= 0:
            raise InvalidParameterError("--width", width, "must be a positive integer")
        self._width = width
        return self

    def set_height(self, height: int) -> "RunConfigBuilder":
        if height <= 0:
            raise InvalidParameterError("--height", height, "must be a positive integer")
        self._height = height
        return self

    @staticmethod
    def select_strategy(
        *,
        window_name: str | None = None,
        active_changes: int | None = None,
        all_viewable: bool = False,
    ) -> StrategyKind:
        """Return the one strategy the options ask for.

        Raises:
            MissingParameterError: no strategy option, or an empty name.
            InvalidParameterError: more than one strategy option.
        """
        selected = [
            kind
            for kind, chosen in (
                (StrategyKind.BY_NAME, window_name is not None),
                (StrategyKind.BY_ACTIVE_CHANGE_COUNT, active_changes is not None),
                (StrategyKind.BY_VIEWABLE_SET, all_viewable),
            )
            if chosen
        ]
        if not selected:
            raise MissingParameterError(
                "strategy", "use --name, --active-changes or --all-viewable"
            )
        if len(selected) > 1:
            raise InvalidParameterError(
                "strategy",
                [kind.value for kind in selected],
                "choose exactly one strategy",
            )
        strategy = selected[0]
        if strategy is StrategyKind.BY_NAME and not (window_name or "").strip():
            raise MissingParameterError("--name", "window name must not be empty")
        return strategy

    def build(
        self,
        *,
        window_name: str | None = None,
        active_changes: int | None = None,
        all_viewable: bool = False,
        max_cycles: int = 20,
        cycle_delay: float = 0.5,
        force: bool = False,
        fullscreen: bool = False,
        command: list[str] | tuple[str, ...] | None = None,
    ) -> RunConfig:
        strategy = self.select_strategy(
            window_name=window_name,
            active_changes=active_changes,
            all_viewable=all_viewable,
        )
        screen = self.screen
        try:
            return RunConfig(
                strategy=strategy,
                window_name=window_name,
                active_changes=active_changes,
                poll=PollConfig(max_cycles=max_cycles, cycle_delay=cycle_delay),
                screen=screen,
                target=TargetSize(
                    width=self._width if self._width is not None else screen.width,
                    height=self._height if self._height is not None else screen.height,
                ),
                force=force,
                fullscreen=fullscreen,
                command=tuple(command) if command else None,
            )
        except ValidationError as exc:
            raise _invalid_from_validation(exc) from exc
