"""maxlaunch CLI — Entry point.

Usage:
    maxlaunch --name "Firefox" -- firefox
    maxlaunch --active-changes 2 --force -- steam
    maxlaunch --all-viewable --cycles 40 --delay 0.25 --exec "kodi --standalone"
    maxlaunch --display HDMI-1 --width 1280 --height 720 --name Player -- mpv video.mkv

Strategy options are mutually exclusive; exactly one is required.
``--display`` must come before ``--width``/``--height`` on the command line.
"""

from __future__ import annotations

from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from maxlaunch import __version__
from maxlaunch.config import LoggingConfig, RunConfigBuilder, Settings, get_settings
from maxlaunch.exceptions import ExitCode, InvalidParameterError, MaxLaunchError
from maxlaunch.logging import configure_logging, get_logger
from maxlaunch.runner import execute
from maxlaunch.screen import XrandrScreenGeometry
from maxlaunch.supervisor import parse_command
from maxlaunch.windowing.tools import resolve_tools

app = typer.Typer(
    name="maxlaunch",
    help="Launch an application and force its window to maximize.",
    pretty_exceptions_enable=False,
)

console = Console(stderr=True)
log = get_logger(__name__)

_ORDER_KEY = "maxlaunch.override_order"


def _record_order(ctx: typer.Context, param: typer.CallbackParam, value: object) -> object:
    """Remember the command-line order of geometry overrides."""
    if value is not None:
        ctx.meta.setdefault(_ORDER_KEY, []).append(param.name)
    return value


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"maxlaunch {__version__}")
        raise typer.Exit()


def _logging_config(settings: Settings, level: str | None, format: str | None) -> LoggingConfig:
    try:
        return LoggingConfig(
            level=(level or settings.logging.level).lower(),
            format=format or settings.logging.format,
        )
    except ValidationError as exc:
        first = exc.errors()[0]
        option = "--log-" + str(first["loc"][0])
        raise InvalidParameterError(option, first.get("input"), first["msg"]) from exc


def _apply_overrides(
    builder: RunConfigBuilder,
    order: list[str],
    display: str | None,
    width: int | None,
    height: int | None,
) -> None:
    for option in order:
        if option == "display" and display is not None:
            builder.use_display(display)
        elif option == "width" and width is not None:
            builder.set_width(width)
        elif option == "height" and height is not None:
            builder.set_height(height)


@app.command(context_settings={"allow_interspersed_args": False})
def main(
    ctx: typer.Context,
    command: Annotated[
        Optional[list[str]],
        typer.Argument(help="Application to launch, with its arguments."),
    ] = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", "-n", help="Maximize the first window whose title contains NAME."),
    ] = None,
    active_changes: Annotated[
        Optional[int],
        typer.Option(
            "--active-changes",
            "-a",
            help="Maximize the window that is active after N active-window changes.",
        ),
    ] = None,
    all_viewable: Annotated[
        bool,
        typer.Option("--all-viewable", "-A", help="Maximize every window that becomes viewable."),
    ] = False,
    cycles: Annotated[
        Optional[int],
        typer.Option("--cycles", "-c", help="Maximum number of polling cycles."),
    ] = None,
    delay: Annotated[
        Optional[float],
        typer.Option("--delay", "-t", help="Seconds between polling cycles."),
    ] = None,
    display: Annotated[
        Optional[str],
        typer.Option("--display", "-d", help="Fit into this display only.", callback=_record_order),
    ] = None,
    width: Annotated[
        Optional[int],
        typer.Option("--width", "-w", help="Target width in pixels.", callback=_record_order),
    ] = None,
    height: Annotated[
        Optional[int],
        typer.Option("--height", "-H", help="Target height in pixels.", callback=_record_order),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Also set maximize state flags."),
    ] = False,
    fullscreen: Annotated[
        bool,
        typer.Option("--fullscreen", "-F", help="Make the window fullscreen instead."),
    ] = False,
    exec_: Annotated[
        Optional[str],
        typer.Option("--exec", "-e", help="Application to launch, as one command string."),
    ] = None,
    log_level: Annotated[
        Optional[str],
        typer.Option("--log-level", help="debug, info, warning, error or critical."),
    ] = None,
    log_format: Annotated[
        Optional[str],
        typer.Option("--log-format", help="console or json."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version."),
    ] = False,
) -> None:
    """Launch an application and force its window to maximize."""
    settings = get_settings()

    try:
        logging_config = _logging_config(settings, log_level, log_format)
        configure_logging(level=logging_config.level, format=logging_config.format)

        strategy = RunConfigBuilder.select_strategy(
            window_name=name, active_changes=active_changes, all_viewable=all_viewable
        )
        argv = parse_command(exec_, command or [])
        tools = resolve_tools(settings.tools, strategy)

        builder = RunConfigBuilder(
            XrandrScreenGeometry(tools.xrandr, timeout=settings.tools.command_timeout)
        )
        _apply_overrides(builder, ctx.meta.get(_ORDER_KEY, []), display, width, height)
        config = builder.build(
            window_name=name,
            active_changes=active_changes,
            all_viewable=all_viewable,
            max_cycles=cycles if cycles is not None else settings.engine.default_cycles,
            cycle_delay=delay if delay is not None else settings.engine.default_delay,
            force=force,
            fullscreen=fullscreen,
            command=argv,
        )
        result = execute(config, settings, tools)
    except MaxLaunchError as exc:
        console.print(f"[red]Error: {escape(exc.message)}[/red]")
        console.print("Try 'maxlaunch --help' for help.")
        raise typer.Exit(int(exc.exit_code))

    log.info("run_finished", outcome=result.outcome.value, cycles=result.cycles)
    raise typer.Exit(int(ExitCode.OK))


if __name__ == "__main__":
    app()
