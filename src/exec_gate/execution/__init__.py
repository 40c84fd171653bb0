"""Command execution.

This subpackage runs approved commands:

* **LocalProcessExecutor** -- async local shell execution with output
  capture, timeout enforcement and process-tree termination.
* **resolve_invocation** / **Invocation** -- shell name -> executable and
  argument vector (``cmd``, ``pwsh``, ``powershell``, ``sh``, ``bash``).
* **build_child_env** -- inherited environment plus request variables.
* **kill_process_tree** -- forced, descendant-aware termination.
"""
from __future__ import annotations

from exec_gate.execution.environment import build_child_env
from exec_gate.execution.local import LocalProcessExecutor
from exec_gate.execution.process_tree import kill_process_tree
from exec_gate.execution.shells import (
    SUPPORTED_SHELLS,
    Invocation,
    build_command_line,
    normalize_shell,
    resolve_invocation,
)

__all__ = [
    "SUPPORTED_SHELLS",
    "Invocation",
    "LocalProcessExecutor",
    "build_child_env",
    "build_command_line",
    "kill_process_tree",
    "normalize_shell",
    "resolve_invocation",
]
