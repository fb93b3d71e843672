"""ProcessSupervisor — launch the application and tie it to the polling loop.

Contract
--------
- ``supervise(loop, argv)`` starts *argv* (if given), runs *loop* as its own
  asyncio task and waits for it.
- When the loop task completes, normally or with an error, the launched
  process is terminated (SIGTERM, then SIGKILL after ``terminate_timeout``).
- When the loop task is cancelled from outside, the process is left alone;
  an unbounded loop therefore never terminates it by this mechanism.

Security notes:
  - The command always runs with ``create_subprocess_exec`` (no shell).
  - ``--exec`` strings are split with ``shlex``, never passed to ``sh -c``.
"""

from __future__ import annotations

import asyncio
import shlex
import shutil
from collections.abc import Coroutine, Sequence
from typing import Any, TypeVar

from maxlaunch.exceptions import ConflictingCommandError, InvalidCommandError
from maxlaunch.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")


def parse_command(exec_string: str | None, trailing: Sequence[str]) -> list[str] | None:
    """Turn the two possible launch-command sources into one argv.

    Raises:
        ConflictingCommandError: both sources were given.
        InvalidCommandError: the command is empty, unparseable, or its
            executable cannot be found.
    """
    trailing = list(trailing)
    if exec_string is not None and trailing:
        raise ConflictingCommandError(trailing)

    if exec_string is not None:
        try:
            argv = shlex.split(exec_string)
        except ValueError as exc:
            raise InvalidCommandError(exec_string, str(exc)) from exc
        if not argv:
            raise InvalidCommandError(exec_string, "command is empty")
    elif trailing:
        argv = trailing
    else:
        return None

    if shutil.which(argv[0]) is None:
        raise InvalidCommandError(shlex.join(argv), f"'{argv[0]}' is not an executable on PATH")
    return argv


class ProcessSupervisor:
    def __init__(self, terminate_timeout: float = 5.0) -> None:
        self._terminate_timeout = terminate_timeout
        self._process: asyncio.subprocess.Process | None = None

    @property
    def process(self) -> asyncio.subprocess.Process | None:
        return self._process

    async def launch(self, argv: Sequence[str]) -> asyncio.subprocess.Process:
        """Start *argv* in its own session and return the process handle."""
        try:
            proc = await asyncio.create_subprocess_exec(*argv, start_new_session=True)
        except OSError as exc:
            raise InvalidCommandError(shlex.join(argv), str(exc)) from exc
        self._process = proc
        log.info("process_launched", argv=list(argv), pid=proc.pid)
        return proc

    async def terminate(self) -> None:
        """Stop the launched process if it is still running."""
        proc = self._process
        if proc is None or proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=self._terminate_timeout)
        except asyncio.TimeoutError:
            log.warning("process_kill", pid=proc.pid, timeout=self._terminate_timeout)
            try:
                proc.kill()
            except ProcessLookupError:
                return
            await proc.wait()
        log.info("process_terminated", pid=proc.pid, return_code=proc.returncode)

    async def supervise(
        self, loop: Coroutine[Any, Any, T], argv: Sequence[str] | None = None
    ) -> T:
        """Run *loop* alongside the launched *argv*; terminate *argv* when *loop* ends."""
        if argv:
            try:
                await self.launch(argv)
            except BaseException:
                loop.close()
                raise

        task = asyncio.create_task(loop, name="maxlaunch-poll")
        try:
            result = await task
        except asyncio.CancelledError:
            raise
        except Exception:
            await self.terminate()
            raise
        await self.terminate()
        return result
