"""Shell resolution -- map a request's shell name to a concrete invocation.

Each supported shell receives the full command line (command plus
space-joined args) as a single argument, so no additional quoting is
applied here:

==============  =====================================================
shell           invocation
==============  =====================================================
``cmd``         ``cmd.exe /C <line>``
``pwsh``        ``pwsh -NoProfile -NonInteractive -Command <line>``
``sh``          ``/bin/sh -c <line>``
``bash``        ``bash -c <line>``
anything else   ``powershell`` with the same flags as ``pwsh``
==============  =====================================================

Windows PowerShell only exists on Windows; elsewhere the ``powershell``
fallback resolves to PowerShell 7 (``pwsh``).
"""
from __future__ import annotations

import shlex
import subprocess
import sys
from dataclasses import dataclass

from exec_gate.core.types import DEFAULT_SHELL

_POWERSHELL_FLAGS: tuple[str, ...] = ("-NoProfile", "-NonInteractive", "-Command")

SUPPORTED_SHELLS: tuple[str, ...] = ("powershell", "pwsh", "cmd", "sh", "bash")


@dataclass(frozen=True, slots=True)
class Invocation:
    """A resolved process invocation.

    Attributes
    ----------
    shell:
        Normalised shell name the invocation was resolved for.
    executable:
        Program to launch.
    argv:
        Arguments passed after the executable.
    """

    shell: str
    executable: str
    argv: tuple[str, ...]

    @property
    def command_line(self) -> str:
        """Render the invocation as a single, loggable command line."""
        parts = [self.executable, *self.argv]
        if sys.platform == "win32":
            return subprocess.list2cmdline(parts)
        return shlex.join(parts)


def normalize_shell(shell: str | None) -> str:
    """Lower-case *shell*; ``None`` or unsupported names become ``powershell``."""
    name = (shell or DEFAULT_SHELL).strip().lower()
    return name if name in SUPPORTED_SHELLS else DEFAULT_SHELL


def build_command_line(command: str, args: list[str] | None = None) -> str:
    """Join *command* and *args* with single spaces."""
    if args:
        return " ".join([command, *args])
    return command


def resolve_invocation(
    shell: str | None,
    command: str,
    args: list[str] | None = None,
) -> Invocation:
    """Resolve ``(shell, command, args)`` into an :class:`Invocation`."""
    name = normalize_shell(shell)
    line = build_command_line(command, args)

    if name == "cmd":
        return Invocation(name, "cmd.exe", ("/C", line))
    if name == "pwsh":
        return Invocation(name, "pwsh", (*_POWERSHELL_FLAGS, line))
    if name == "sh":
        return Invocation(name, "/bin/sh", ("-c", line))
    if name == "bash":
        return Invocation(name, "bash", ("-c", line))

    executable = "powershell.exe" if sys.platform == "win32" else "pwsh"
    return Invocation(DEFAULT_SHELL, executable, (*_POWERSHELL_FLAGS, line))
