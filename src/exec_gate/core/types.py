"""exec-gate shared domain types.

This module defines every value type, enum, and Pydantic model that is
shared between the policy engine and the executors.  All public symbols
are re-exported from ``exec_gate.core``.

Key design decisions:
* All models carry a lower-camel-case alias for every field
  (``defaultAction``, ``timeoutMs`` ...) so that ``model_dump(by_alias=True)``
  produces the persisted/wire shape, while ``populate_by_name`` keeps the
  snake_case names usable from Python.
* Enums use *string* values so they serialise cleanly to JSON.
* :class:`CommandResult` enforces ``timed_out => exit_code == -1``.
"""
from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

DEFAULT_SHELL = "powershell"
"""Shell assumed when a request or evaluation does not name one."""


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ExecAction(enum.StrEnum):
    """Outcome attached to a rule or to the policy default.

    * **allow** -- the command may run.
    * **deny** -- the command must not run.
    * **prompt** -- a human must confirm; treated as not allowed unless
      the caller supplies a confirmation handler.
    """

    ALLOW = "allow"
    DENY = "deny"
    PROMPT = "prompt"


def _lower_action(value: object) -> object:
    """Accept ``"Allow"``/``"DENY"`` spellings from hand-edited documents."""
    return value.lower() if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Policy models
# ---------------------------------------------------------------------------

class ExecRule(BaseModel):
    """A single rule in the ordered policy list.

    ``pattern`` is a glob (``*`` any run of characters, ``?`` exactly one),
    matched case-insensitively against the whole command string.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pattern: str = "*"
    action: ExecAction = ExecAction.DENY
    shells: list[str] | None = Field(
        default=None,
        description="Restrict the rule to these shells; None or empty means all shells.",
    )
    description: str | None = None
    enabled: bool = True

    @field_validator("action", mode="before")
    @classmethod
    def normalize_action_case(cls, value: object) -> object:
        return _lower_action(value)

    def applies_to_shell(self, shell: str) -> bool:
        """Return ``True`` if the rule's shell scope admits *shell*."""
        if not self.shells:
            return True
        normalized = shell.lower()
        return any(s.lower() == normalized for s in self.shells)


class PolicyDocument(BaseModel):
    """The persisted form of the policy: default action plus ordered rules."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    default_action: ExecAction = ExecAction.DENY
    rules: list[ExecRule] = Field(default_factory=list)

    @field_validator("default_action", mode="before")
    @classmethod
    def normalize_action_case(cls, value: object) -> object:
        return _lower_action(value)

    @field_validator("rules", mode="before")
    @classmethod
    def null_rules_as_empty(cls, value: object) -> object:
        return [] if value is None else value


class EvaluationResult(BaseModel):
    """Result of evaluating a command against the policy."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True,
    )

    allowed: bool
    action: ExecAction
    matched_pattern: str | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# Execution models
# ---------------------------------------------------------------------------

class CommandRequest(BaseModel):
    """A request to execute a shell command through an executor."""

    model_config = ConfigDict(
        strict=True, alias_generator=to_camel, populate_by_name=True,
    )

    command: str
    args: list[str] | None = None
    shell: str | None = Field(
        default=None,
        description='"powershell", "pwsh", "cmd", "sh" or "bash"; None means powershell.',
    )
    cwd: str | None = None
    timeout_ms: int = Field(
        default=0,
        ge=0,
        description="Timeout in milliseconds; 0 means unbounded.",
    )
    env: dict[str, str] | None = Field(
        default=None,
        description="Variables merged into the inherited environment.",
    )


class CommandResult(BaseModel):
    """Captured output and exit status of one command execution."""

    model_config = ConfigDict(
        strict=True, alias_generator=to_camel, populate_by_name=True,
    )

    stdout: str = ""
    stderr: str = ""
    exit_code: int
    timed_out: bool = False
    duration_ms: int = 0

    @model_validator(mode="after")
    def check_timed_out_exit_code(self) -> CommandResult:
        if self.timed_out and self.exit_code != -1:
            raise ValueError("a timed-out result must carry exit_code -1")
        return self
