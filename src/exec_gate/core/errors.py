"""exec-gate error-code hierarchy.

Hierarchy
---------
::

    ExecGateError
    +-- PolicyError          (EG-E1xx)
    |   +-- PolicyLoadError      EG-E100
    |   +-- PolicySaveError      EG-E101
    +-- ExecutionError       (EG-E2xx)
        +-- ProcessStartError    EG-E200
        +-- ExecutionTimeout     EG-E201

None of these escape the public ``evaluate`` / ``run`` contracts: the
policy engine recovers from load failures and logs save failures, and
the executor turns start failures and timeouts into a
:class:`~exec_gate.core.types.CommandResult`.  The classes exist so the
internal seams (store -> engine, spawn -> result) carry structured,
loggable context.

Usage
-----
Catch by category::

    try:
        document = store.load()
    except PolicyError:
        ...
"""
from __future__ import annotations

from typing import Any

from exec_gate.core.types import CommandResult

# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class ExecGateError(Exception):
    """Base exception for all exec-gate errors.

    Attributes
    ----------
    code : str
        Error code, e.g. ``"EG-E100"``.
    message : str
        Human-readable description.
    details : dict[str, Any]
        Machine-readable context specific to the error instance.
    resolution : str
        Suggested action for the caller.
    """

    code: str = "EG-E000"
    message: str = "Unknown exec-gate error"
    resolution: str = ""

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        resolution: str | None = None,
    ) -> None:
        self.details: dict[str, Any] = details or {}
        if message is not None:
            self.message = message
        if resolution is not None:
            self.resolution = resolution
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


# ===================================================================
# Category base classes
# ===================================================================

class PolicyError(ExecGateError):
    """EG-E1xx -- Policy persistence errors."""

    code = "EG-E1XX"


class ExecutionError(ExecGateError):
    """EG-E2xx -- Command execution errors."""

    code = "EG-E2XX"


# ===================================================================
# EG-E1xx  Policy errors
# ===================================================================

class PolicyLoadError(PolicyError):
    """EG-E100 -- The persisted policy document is missing or malformed."""

    code = "EG-E100"
    message = "Policy document could not be loaded"
    resolution = (
        "The default policy has been installed. Fix or delete the policy "
        "file to restore custom rules."
    )


class PolicySaveError(PolicyError):
    """EG-E101 -- The policy document could not be written."""

    code = "EG-E101"
    message = "Policy document could not be saved"
    resolution = (
        "The in-memory policy remains in effect for this process. Check "
        "permissions and free space for the policy directory."
    )


# ===================================================================
# EG-E2xx  Execution errors
# ===================================================================

class ProcessStartError(ExecutionError):
    """EG-E200 -- The shell executable could not be launched."""

    code = "EG-E200"
    message = "Process could not be started"
    resolution = "Verify the shell is installed and the working directory exists."

    def to_result(self, duration_ms: int = 0) -> CommandResult:
        """Report this failure as a :class:`CommandResult` (``exit_code=-1``)."""
        return CommandResult(
            stdout="",
            stderr=f"Failed to start: {self.message}",
            exit_code=-1,
            timed_out=False,
            duration_ms=duration_ms,
        )


class ExecutionTimeout(ExecutionError):
    """EG-E201 -- The process exceeded its time budget and was killed."""

    code = "EG-E201"
    message = "Command execution timed out"
    resolution = "Increase timeout_ms or optimise the command."


