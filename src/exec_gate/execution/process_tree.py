"""Forced termination of a process and all of its descendants.

Shells routinely spawn nested processes, so killing only the direct
child leaves the real workload running.  :func:`kill_process_tree`
therefore:

1. Enumerates the descendants of the root with ``psutil`` *before*
   anything is signalled (a killed parent orphans its children, after
   which they can no longer be found through it).
2. On POSIX, sends ``SIGKILL`` to the root's process group.  The local
   executor starts every command in its own session, so the group id
   equals the root pid.
3. Force-kills the root and every enumerated descendant individually,
   catching processes that moved to another group.
4. Waits (bounded) for the descendants to disappear.

Failures are logged, never raised.  The root itself is not waited for
here: it is a child of the caller, whose own ``wait()`` must reap it.
"""
from __future__ import annotations

import logging
import os
import signal
import time

import psutil

logger = logging.getLogger(__name__)


def _collect_descendants(root: psutil.Process) -> list[psutil.Process]:
    try:
        return root.children(recursive=True)
    except psutil.NoSuchProcess:
        return []
    except psutil.Error as exc:
        logger.warning("[EXEC] Cannot enumerate children of pid %d: %s", root.pid, exc)
        return []


def _is_gone(proc: psutil.Process) -> bool:
    try:
        return proc.status() == psutil.STATUS_ZOMBIE
    except psutil.NoSuchProcess:
        return True
    except psutil.Error:
        return False


def _wait_gone(procs: list[psutil.Process], timeout: float) -> list[psutil.Process]:
    """Poll until every process in *procs* has exited; return the survivors.

    A zombie counts as exited: it no longer runs, and reaping it is the
    job of its (new) parent.
    """
    deadline = time.monotonic() + timeout
    alive = list(procs)
    while alive:
        alive = [p for p in alive if not _is_gone(p)]
        if not alive or time.monotonic() >= deadline:
            break
        time.sleep(0.01)
    return alive


def _kill_group(pgid: int) -> None:
    try:
        os.killpg(pgid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except PermissionError as exc:
        logger.warning("[EXEC] Cannot signal process group %d: %s", pgid, exc)


def kill_process_tree(
    pid: int,
    *,
    include_root: bool = True,
    timeout: float = 2.0,
) -> int:
    """Force-kill the process tree rooted at *pid*.

    Parameters
    ----------
    pid:
        Pid of the root process (and, on POSIX, of its process group).
    include_root:
        ``False`` when the root has already exited and been reaped; only
        its process group is signalled then, since the pid itself may no
        longer identify the same process.
    timeout:
        Seconds to wait for the descendants to exit.

    Returns
    -------
    int
        The number of processes that were sent a kill.
    """
    victims: list[psutil.Process] = []
    if include_root:
        try:
            root = psutil.Process(pid)
        except psutil.NoSuchProcess:
            root = None
        except psutil.Error as exc:
            logger.warning("[EXEC] Cannot inspect pid %d: %s", pid, exc)
            root = None
        if root is not None:
            victims = [root, *_collect_descendants(root)]

    if os.name == "posix":
        _kill_group(pid)

    signalled = 0
    for proc in victims:
        try:
            proc.kill()
            signalled += 1
        except psutil.NoSuchProcess:
            continue
        except psutil.AccessDenied as exc:
            logger.warning("[EXEC] Failed to kill pid %d: %s", proc.pid, exc)

    for proc in _wait_gone(victims[1:], timeout):
        logger.warning("[EXEC] Process %d survived kill", proc.pid)

    logger.debug("[EXEC] Killed process tree of pid %d (%d processes)", pid, signalled)
    return signalled
