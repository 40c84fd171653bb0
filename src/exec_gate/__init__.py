"""exec-gate -- policy-gated shell command execution.

A command is run only if an ordered, persisted rule list allows it.

Components
----------
1. Core types, errors, config, interfaces (:mod:`exec_gate.core`)
2. Approval policy (:mod:`exec_gate.policy`)
3. Command execution (:mod:`exec_gate.execution`)
4. Gate facade (:mod:`exec_gate.gate`)
"""
from __future__ import annotations

__version__ = "1.0.0a1"

# ---------------------------------------------------------------------------
# Core types, errors, config, interfaces
# ---------------------------------------------------------------------------
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
    CommandRequest,
    CommandResult,
    EvaluationResult,
    ExecAction,
    ExecRule,
    PolicyDocument,
)

# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------
from exec_gate.execution import LocalProcessExecutor, kill_process_tree

# ---------------------------------------------------------------------------
# Gate
# ---------------------------------------------------------------------------
from exec_gate.gate import CommandGate, GateOutcome

# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------
from exec_gate.policy import (
    DEFAULT_RULE_COUNT,
    JsonPolicyStore,
    PolicyEngine,
    RuleMatcher,
    default_rules,
)

__all__ = [
    "__version__",
    # Core
    "CommandExecutor",
    "CommandRequest",
    "CommandResult",
    "EvaluationResult",
    "ExecAction",
    "ExecRule",
    "GateConfig",
    "InMemoryPolicyStore",
    "PolicyDocument",
    "PolicyStore",
    # Errors
    "ExecGateError",
    "ExecutionError",
    "ExecutionTimeout",
    "PolicyError",
    "PolicyLoadError",
    "PolicySaveError",
    "ProcessStartError",
    # Policy
    "DEFAULT_RULE_COUNT",
    "JsonPolicyStore",
    "PolicyEngine",
    "RuleMatcher",
    "default_rules",
    # Execution
    "LocalProcessExecutor",
    "kill_process_tree",
    # Gate
    "CommandGate",
    "GateOutcome",
]
