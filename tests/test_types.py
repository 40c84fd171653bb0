"""Tests for exec_gate.core: types, errors, config, interfaces."""
from __future__ import annotations

import os

import pytest
from pydantic import ValidationError

from exec_gate.core import (
    CommandExecutor,
    CommandRequest,
    CommandResult,
    EvaluationResult,
    ExecAction,
    ExecGateError,
    ExecRule,
    ExecutionError,
    ExecutionTimeout,
    GateConfig,
    PolicyDocument,
    PolicyError,
    PolicyLoadError,
    PolicySaveError,
    ProcessStartError,
)
from exec_gate.execution import LocalProcessExecutor, build_command_line

# ===================================================================
# Models
# ===================================================================


class TestExecRule:
    """ExecRule defaults and shell scoping."""

    def test_defaults(self) -> None:
        rule = ExecRule()
        assert rule.pattern == "*"
        assert rule.action == ExecAction.DENY
        assert rule.shells is None
        assert rule.description is None
        assert rule.enabled is True

    def test_populate_by_alias_and_name(self) -> None:
        by_alias = ExecRule.model_validate({"pattern": "x", "action": "allow"})
        by_name = ExecRule(pattern="x", action=ExecAction.ALLOW)
        assert by_alias == by_name

    @pytest.mark.parametrize("shells", [None, []])
    def test_unscoped_applies_to_every_shell(self, shells: list[str] | None) -> None:
        rule = ExecRule(shells=shells)
        assert rule.applies_to_shell("cmd")
        assert rule.applies_to_shell("bash")

    def test_scoped(self) -> None:
        rule = ExecRule(shells=["PowerShell", "pwsh"])
        assert rule.applies_to_shell("powershell")
        assert rule.applies_to_shell("PWSH")
        assert not rule.applies_to_shell("cmd")


class TestPolicyDocument:
    def test_defaults(self) -> None:
        doc = PolicyDocument()
        assert doc.default_action == ExecAction.DENY
        assert doc.rules == []

    def test_alias_dump(self) -> None:
        dumped = PolicyDocument(default_action=ExecAction.ALLOW).model_dump(by_alias=True)
        assert "defaultAction" in dumped


class TestEvaluationResult:
    def test_frozen(self) -> None:
        result = EvaluationResult(allowed=True, action=ExecAction.ALLOW)
        with pytest.raises(ValidationError):
            result.allowed = False  # type: ignore[misc]

    def test_optional_fields(self) -> None:
        result = EvaluationResult(allowed=False, action=ExecAction.DENY)
        assert result.matched_pattern is None
        assert result.reason is None


class TestCommandRequest:
    def test_minimal(self) -> None:
        req = CommandRequest(command="hostname")
        assert req.shell is None
        assert req.timeout_ms == 0
        assert req.args is None
        assert req.env is None

    def test_negative_timeout_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CommandRequest(command="x", timeout_ms=-1)

    def test_strict_types(self) -> None:
        with pytest.raises(ValidationError):
            CommandRequest(command="x", timeout_ms="100")  # type: ignore[arg-type]

    def test_camel_case_aliases(self) -> None:
        req = CommandRequest.model_validate({"command": "x", "timeoutMs": 250})
        assert req.timeout_ms == 250

    def test_args_joined_into_command_line(self) -> None:
        req = CommandRequest(command="echo", args=["a", "b"])
        assert build_command_line(req.command, req.args) == "echo a b"
        bare = CommandRequest(command="echo")
        assert build_command_line(bare.command, bare.args) == "echo"


class TestCommandResult:
    def test_timed_out_requires_minus_one(self) -> None:
        with pytest.raises(ValidationError, match="exit_code -1"):
            CommandResult(exit_code=0, timed_out=True)

    def test_timed_out_valid(self) -> None:
        result = CommandResult(exit_code=-1, timed_out=True, duration_ms=10)
        assert result.stdout == ""
        assert result.stderr == ""

    def test_minus_one_without_timeout_allowed(self) -> None:
        assert CommandResult(exit_code=-1).timed_out is False


# ===================================================================
# Errors
# ===================================================================


class TestErrorHierarchy:
    @pytest.mark.parametrize(
        ("cls", "base", "code"),
        [
            (PolicyLoadError, PolicyError, "EG-E100"),
            (PolicySaveError, PolicyError, "EG-E101"),
            (ProcessStartError, ExecutionError, "EG-E200"),
            (ExecutionTimeout, ExecutionError, "EG-E201"),
        ],
    )
    def test_codes_and_categories(
        self, cls: type[ExecGateError], base: type[ExecGateError], code: str,
    ) -> None:
        err = cls()
        assert isinstance(err, base)
        assert isinstance(err, ExecGateError)
        assert err.code == code
        assert err.message
        assert err.resolution

    def test_message_override(self) -> None:
        err = PolicyLoadError("bad file", details={"source": "p.json"})
        assert str(err) == "bad file"
        assert err.details == {"source": "p.json"}

    def test_repr(self) -> None:
        assert repr(ExecutionTimeout()) == (
            "ExecutionTimeout(code='EG-E201', message='Command execution timed out')"
        )

    def test_start_error_as_result(self) -> None:
        result = ProcessStartError("No such file: 'nope'").to_result(duration_ms=3)
        assert result.exit_code == -1
        assert result.timed_out is False
        assert result.stdout == ""
        assert result.stderr == "Failed to start: No such file: 'nope'"
        assert result.duration_ms == 3


# ===================================================================
# Config
# ===================================================================


class TestGateConfig:
    def test_defaults(self) -> None:
        config = GateConfig()
        assert config.default_shell == "powershell"
        assert config.default_timeout_ms == 0
        assert config.kill_grace_s > 0

    def test_policy_path(self, tmp_path: os.PathLike[str]) -> None:
        config = GateConfig(data_dir=str(tmp_path))
        assert config.policy_path == os.path.join(str(tmp_path), "exec-policy.json")

    def test_policy_path_expands_user(self) -> None:
        assert not GateConfig().policy_path.startswith("~")

    def test_invalid_values(self) -> None:
        with pytest.raises(ValidationError):
            GateConfig(default_timeout_ms=-5)
        with pytest.raises(ValidationError):
            GateConfig(kill_grace_s=0.0)
        with pytest.raises(ValidationError):
            GateConfig(policy_file_name="")


# ===================================================================
# Interfaces
# ===================================================================


class TestCommandExecutorProtocol:
    def test_local_executor_satisfies_protocol(self) -> None:
        executor = LocalProcessExecutor()
        assert isinstance(executor, CommandExecutor)
        assert executor.name == "local"
