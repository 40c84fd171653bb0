"""Local process execution.

This module implements :class:`LocalProcessExecutor`, the default
:class:`~exec_gate.core.interfaces.CommandExecutor`: it runs an approved
command in a local shell process, captures its output, and enforces the
request's timeout.

Key guarantees:
1. Start failures (missing shell, bad working directory) are reported as
   a :class:`CommandResult` with ``exit_code=-1``, never raised.
2. On timeout the whole process tree is killed *before* the result is
   returned; the result carries ``timed_out=True`` and ``exit_code=-1``
   plus whatever output had been read.
3. Cancelling the task awaiting :meth:`LocalProcessExecutor.run` kills
   the process tree and re-raises :class:`asyncio.CancelledError`.
4. Every invocation logs the resolved command line before it starts and
   a summary line after it finishes.

There is no internal concurrency limit: N concurrent ``run`` calls start
N processes.  Callers that need a bound wrap ``run`` in their own
:class:`asyncio.Semaphore`.
"""
from __future__ import annotations

import asyncio
import codecs
import logging
import subprocess
import sys
import time
from typing import Any

from exec_gate.core.config import GateConfig
from exec_gate.core.errors import ExecutionTimeout, ProcessStartError
from exec_gate.core.types import CommandRequest, CommandResult
from exec_gate.execution.environment import build_child_env
from exec_gate.execution.process_tree import kill_process_tree
from exec_gate.execution.shells import Invocation, resolve_invocation

logger = logging.getLogger(__name__)

# Bytes read from a pipe per iteration.
_READ_CHUNK = 64 * 1024


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _spawn_options() -> dict[str, Any]:
    """Platform-specific process creation options.

    POSIX: a new session, so the command and its descendants share a
    process group that can be killed as a unit.  Windows: no console
    window and a new process group.
    """
    if sys.platform == "win32":
        return {
            "creationflags": subprocess.CREATE_NO_WINDOW | subprocess.CREATE_NEW_PROCESS_GROUP,
        }
    return {"start_new_session": True}


async def _pump(stream: asyncio.StreamReader | None, sink: list[str]) -> None:
    """Append decoded UTF-8 text from *stream* to *sink* until EOF."""
    if stream is None:
        return
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        sink.append(decoder.decode(chunk))
    tail = decoder.decode(b"", final=True)
    if tail:
        sink.append(tail)


class LocalProcessExecutor:
    """Execute commands as local shell processes.

    Usage::

        executor = LocalProcessExecutor()
        result = await executor.run(
            CommandRequest(command="echo hello", shell="sh", timeout_ms=5000),
        )
        # result.exit_code, result.stdout, result.stderr, result.timed_out

    Parameters
    ----------
    config:
        Optional :class:`GateConfig`.  ``default_shell`` applies to
        requests without a shell, ``default_timeout_ms`` to requests with
        ``timeout_ms=0``, and ``kill_grace_s`` bounds the wait for a
        killed process tree.
    """

    def __init__(self, config: GateConfig | None = None) -> None:
        self._config = config or GateConfig()

    @property
    def name(self) -> str:
        return "local"

    @property
    def config(self) -> GateConfig:
        return self._config

    async def run(self, request: CommandRequest) -> CommandResult:
        """Run *request* and return its captured result.

        Raises
        ------
        asyncio.CancelledError
            If the awaiting task is cancelled; the process tree has been
            killed by the time it propagates.
        """
        invocation = resolve_invocation(
            request.shell or self._config.default_shell,
            request.command,
            request.args,
        )
        timeout_ms = request.timeout_ms or self._config.default_timeout_ms

        logger.info("[EXEC] %s", invocation.command_line)
        started = time.monotonic()

        try:
            proc = await self._spawn(invocation, request)
        except (OSError, ValueError) as exc:
            error = ProcessStartError(
                str(exc),
                details={"executable": invocation.executable, "cwd": request.cwd},
            )
            logger.error(
                "[EXEC] %s Failed to start process: %s %s",
                error.code, error.message, error.details,
            )
            return error.to_result(_elapsed_ms(started))

        stdout_parts: list[str] = []
        stderr_parts: list[str] = []
        exit_task = asyncio.create_task(proc.wait())
        readers = {
            asyncio.create_task(_pump(proc.stdout, stdout_parts)),
            asyncio.create_task(_pump(proc.stderr, stderr_parts)),
        }
        tasks = {exit_task, *readers}
        timed_out = False

        try:
            _, pending = await asyncio.wait(
                tasks,
                timeout=timeout_ms / 1000 if timeout_ms > 0 else None,
            )
            if pending:
                timed_out = True
                timeout = ExecutionTimeout(
                    f"Process exceeded timeout of {timeout_ms}ms",
                    details={"timeout_ms": timeout_ms, "pid": proc.pid},
                )
                logger.warning(
                    "[EXEC] %s %s %s; killing process tree",
                    timeout.code, timeout.message, timeout.details,
                )
                await self._kill(proc, exit_task, readers)
        except asyncio.CancelledError:
            logger.warning("[EXEC] Cancelled; killing process tree (pid=%d)", proc.pid)
            await self._kill(proc, exit_task, readers)
            raise
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        for reader in readers:
            if reader.done() and not reader.cancelled() and reader.exception() is not None:
                logger.warning("[EXEC] Output stream failed: %s", reader.exception())

        result = CommandResult(
            stdout="".join(stdout_parts).rstrip(),
            stderr="".join(stderr_parts).rstrip(),
            exit_code=-1 if timed_out else exit_task.result(),
            timed_out=timed_out,
            duration_ms=_elapsed_ms(started),
        )

        logger.info(
            "[EXEC] Exit=%d Duration=%dms TimedOut=%s Stdout=%dchars Stderr=%dchars",
            result.exit_code, result.duration_ms, result.timed_out,
            len(result.stdout), len(result.stderr),
        )
        return result

    # -- Internal helpers ---------------------------------------------------

    @staticmethod
    async def _spawn(
        invocation: Invocation,
        request: CommandRequest,
    ) -> asyncio.subprocess.Process:
        env = build_child_env(request.env)
        return await asyncio.create_subprocess_exec(
            invocation.executable,
            *invocation.argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=request.cwd or None,
            env=env,
            **_spawn_options(),
        )

    async def _kill(
        self,
        proc: asyncio.subprocess.Process,
        exit_task: asyncio.Task[int],
        readers: set[asyncio.Task[None]],
    ) -> None:
        """Kill the tree of *proc*, then wait (bounded) for exit and EOF."""
        grace = self._config.kill_grace_s
        try:
            await asyncio.to_thread(
                kill_process_tree,
                proc.pid,
                include_root=proc.returncode is None,
                timeout=grace,
            )
        except OSError as exc:
            logger.warning("[EXEC] Failed to kill process: %s", exc)

        _, pending = await asyncio.wait({exit_task, *readers}, timeout=grace)
        if exit_task in pending:
            logger.warning("[EXEC] Process %d not reaped within %.1fs", proc.pid, grace)
