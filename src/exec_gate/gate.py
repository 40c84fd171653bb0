"""Command gate -- evaluate, then execute.

This module implements :class:`CommandGate`, the entry point that ties
the two contracts of the package together:

1. **Evaluate** -- the command, under its normalised shell, against the
   :class:`~exec_gate.policy.engine.PolicyEngine`.  The request handed
   to the executor carries that same shell.
2. **Confirm** -- a ``prompt`` outcome is put to the optional prompt
   handler; without one it is refused.
3. **Execute** -- an allowed request runs on the configured
   :class:`~exec_gate.core.interfaces.CommandExecutor`.

Usage
-----
::

    gate = CommandGate.from_config(GateConfig(data_dir="/var/lib/exec-gate"))
    outcome = await gate.execute(CommandRequest(command="hostname", shell="cmd"))
    if outcome.executed:
        print(outcome.result.stdout)
    else:
        print("refused:", outcome.evaluation.reason)

Refusals are returned, not raised.  Only cancellation of the awaiting
task propagates.
"""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from exec_gate.core.config import GateConfig
from exec_gate.core.interfaces import CommandExecutor
from exec_gate.core.types import (
    CommandRequest,
    CommandResult,
    EvaluationResult,
    ExecAction,
)
from exec_gate.execution.local import LocalProcessExecutor
from exec_gate.execution.shells import normalize_shell
from exec_gate.policy.engine import PolicyEngine

logger = logging.getLogger(__name__)

PromptHandler = Callable[[CommandRequest, EvaluationResult], Awaitable[bool]]
"""Async callable asked to confirm a ``prompt`` outcome; ``True`` approves."""


@dataclass(frozen=True, slots=True)
class GateOutcome:
    """The result of passing one request through the gate.

    Attributes
    ----------
    evaluation:
        The policy decision, after any prompt confirmation.
    result:
        The execution result, or ``None`` if the request was refused.
    """

    evaluation: EvaluationResult
    result: CommandResult | None = None

    @property
    def executed(self) -> bool:
        """Return ``True`` if the command was run."""
        return self.result is not None


class CommandGate:
    """Gate command execution on the approval policy.

    Parameters
    ----------
    engine:
        The policy engine consulted for every request.
    executor:
        Executor for approved requests.  Defaults to a
        :class:`LocalProcessExecutor`.
    prompt_handler:
        Optional async confirmation callback for ``prompt`` outcomes.
    default_shell:
        Shell for requests that name none.  Defaults to the executor's
        configured shell when the executor is a
        :class:`LocalProcessExecutor`.  The shell is normalised the way
        the executor resolves it (unsupported names become
        ``powershell``) and that one canonical name is used both for
        evaluation and for execution.
    """

    def __init__(
        self,
        engine: PolicyEngine,
        executor: CommandExecutor | None = None,
        *,
        prompt_handler: PromptHandler | None = None,
        default_shell: str | None = None,
    ) -> None:
        self._engine = engine
        self._executor = executor or LocalProcessExecutor()
        self._prompt_handler = prompt_handler
        if default_shell is None and isinstance(self._executor, LocalProcessExecutor):
            default_shell = self._executor.config.default_shell
        self._default_shell = default_shell

    @classmethod
    def from_config(
        cls,
        config: GateConfig,
        *,
        prompt_handler: PromptHandler | None = None,
    ) -> CommandGate:
        """Build a gate with a JSON-backed engine and a local executor."""
        return cls(
            PolicyEngine.from_config(config),
            LocalProcessExecutor(config),
            prompt_handler=prompt_handler,
            default_shell=config.default_shell,
        )

    @property
    def engine(self) -> PolicyEngine:
        return self._engine

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    def evaluate(self, request: CommandRequest) -> EvaluationResult:
        """Evaluate *request* against the policy without running it."""
        return self._engine.evaluate(request.command, self._shell_for(request))

    async def execute(self, request: CommandRequest) -> GateOutcome:
        """Evaluate *request* and, if it is allowed, run it."""
        shell = self._shell_for(request)
        request = request.model_copy(update={"shell": shell})
        evaluation = self._engine.evaluate(request.command, shell)

        if evaluation.action == ExecAction.PROMPT:
            evaluation = await self._confirm(request, evaluation)

        if not evaluation.allowed:
            logger.info(
                "[EXEC-GATE] Refused %r on %s: %s",
                request.command, self._executor.name, evaluation.reason,
            )
            return GateOutcome(evaluation=evaluation)

        result = await self._executor.run(request)
        return GateOutcome(evaluation=evaluation, result=result)

    def _shell_for(self, request: CommandRequest) -> str:
        return normalize_shell(request.shell or self._default_shell)

    async def _confirm(
        self,
        request: CommandRequest,
        evaluation: EvaluationResult,
    ) -> EvaluationResult:
        if self._prompt_handler is None:
            return evaluation.model_copy(
                update={"reason": f"{evaluation.reason} (confirmation unavailable)"},
            )

        approved = await self._prompt_handler(request, evaluation)
        logger.info(
            "[EXEC-GATE] Prompt for %r %s",
            request.command, "approved" if approved else "declined",
        )
        return evaluation.model_copy(
            update={
                "allowed": bool(approved),
                "reason": f"{evaluation.reason} ({'approved' if approved else 'declined'})",
            },
        )
