"""Run orchestration — wire a ``RunConfig`` to the window system and run it.

    RunConfig ──► build_strategy ──► ProcessSupervisor.supervise(strategy.run(), argv)
                                                   │
                        MaximizeAction ──► ActionDispatcher (drained at the end)
"""

from __future__ import annotations

import asyncio

from maxlaunch.config import EngineConfig, RunConfig, Settings, StrategyKind
from maxlaunch.logging import get_logger
from maxlaunch.maximize import ActionDispatcher, MaximizeAction
from maxlaunch.strategies import (
    AcquisitionStrategy,
    ByActiveChangeCountStrategy,
    ByNameStrategy,
    ByViewableSetStrategy,
    StrategyResult,
)
from maxlaunch.supervisor import ProcessSupervisor
from maxlaunch.windowing.base import WindowController, WindowSystemQuery
from maxlaunch.windowing.tools import ResolvedTools
from maxlaunch.windowing.x11 import WmctrlController, X11WindowQuery

log = get_logger(__name__)


def build_strategy(
    config: RunConfig,
    query: WindowSystemQuery,
    action: MaximizeAction,
    engine: EngineConfig,
) -> AcquisitionStrategy:
    if config.strategy is StrategyKind.BY_NAME:
        return ByNameStrategy(
            query, action, window_name=config.window_name or "", poll=config.poll
        )
    if config.strategy is StrategyKind.BY_ACTIVE_CHANGE_COUNT:
        return ByActiveChangeCountStrategy(
            query,
            action,
            target_changes=config.active_changes or 0,
            poll_interval=engine.active_poll_interval,
        )
    if config.strategy is StrategyKind.BY_VIEWABLE_SET:
        return ByViewableSetStrategy(query, action, poll=config.poll)
    raise ValueError(f"No strategy implementation for {config.strategy!r}")


async def run(
    config: RunConfig,
    *,
    query: WindowSystemQuery,
    controller: WindowController,
    engine: EngineConfig,
    supervisor: ProcessSupervisor | None = None,
) -> StrategyResult:
    """Launch the command, run the strategy loop, then stop the command."""
    dispatcher = ActionDispatcher()
    action = MaximizeAction(
        controller,
        dispatcher,
        screen=config.screen,
        target=config.target,
        force=config.force,
        fullscreen=config.fullscreen,
    )
    strategy = build_strategy(config, query, action, engine)
    if supervisor is None:
        supervisor = ProcessSupervisor(terminate_timeout=engine.terminate_timeout)

    try:
        return await supervisor.supervise(strategy.run(), config.command)
    finally:
        await dispatcher.drain(engine.drain_timeout)


def execute(config: RunConfig, settings: Settings, tools: ResolvedTools) -> StrategyResult:
    """Blocking entry point used by the CLI."""
    timeout = settings.tools.command_timeout
    query = X11WindowQuery(
        wmctrl=tools.wmctrl,
        xwininfo=tools.xwininfo,
        xdotool=tools.xdotool,
        timeout=timeout,
    )
    controller = WmctrlController(wmctrl=tools.wmctrl, timeout=timeout)
    log.debug(
        "run_starting",
        strategy=config.strategy.value,
        screen=config.screen.model_dump(),
        target=config.target.model_dump(),
        command=list(config.command) if config.command else None,
    )
    return asyncio.run(run(config, query=query, controller=controller, engine=settings.engine))
