"""exec-gate core: shared types, errors, configuration and interfaces."""
from __future__ import annotations

from exec_gate.core.config import GateConfig
from exec_gate.core.errors import (
    ExecGateError,
    ExecutionError,
    ExecutionTimeout,
    PolicyError,
    PolicyLoadError,
    PolicySaveError,
    ProcessStartError,
)
from exec_gate.core.interfaces import CommandExecutor, InMemoryPolicyStore, PolicyStore
from exec_gate.core.types import (
    DEFAULT_SHELL,
    CommandRequest,
    CommandResult,
    EvaluationResult,
    ExecAction,
    ExecRule,
    PolicyDocument,
)

__all__ = [
    "DEFAULT_SHELL",
    "CommandExecutor",
    "CommandRequest",
    "CommandResult",
    "EvaluationResult",
    "ExecAction",
    "ExecGateError",
    "ExecRule",
    "ExecutionError",
    "ExecutionTimeout",
    "GateConfig",
    "InMemoryPolicyStore",
    "PolicyDocument",
    "PolicyError",
    "PolicyLoadError",
    "PolicySaveError",
    "PolicyStore",
    "ProcessStartError",
]
