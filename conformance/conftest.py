"""Shared fixtures for exec-gate conformance tests.

Provides policy engines backed by the JSON document store and a local
executor configured for ``/bin/sh``.
"""
from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from exec_gate.core.config import GateConfig
from exec_gate.core.types import ExecAction, ExecRule, PolicyDocument
from exec_gate.execution import LocalProcessExecutor
from exec_gate.policy import JsonPolicyStore, PolicyEngine

EngineFactory = Callable[..., PolicyEngine]


# ---------------------------------------------------------------------------
# Policy fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def policy_path(tmp_path: Path) -> Path:
    return tmp_path / "exec-policy.json"


@pytest.fixture()
def json_store(policy_path: Path) -> JsonPolicyStore:
    return JsonPolicyStore(policy_path)


@pytest.fixture()
def engine_factory(json_store: JsonPolicyStore) -> EngineFactory:
    """Persist a document, then return an engine that loaded it."""

    def _factory(
        rules: list[ExecRule],
        default_action: ExecAction = ExecAction.DENY,
    ) -> PolicyEngine:
        json_store.save(PolicyDocument(default_action=default_action, rules=rules))
        return PolicyEngine(json_store)

    return _factory


@pytest.fixture()
def engine(engine_factory: EngineFactory) -> PolicyEngine:
    return engine_factory([
        ExecRule(pattern="echo *", action=ExecAction.ALLOW, description="Echo commands"),
        ExecRule(pattern="rm *", action=ExecAction.DENY, description="Block rm"),
    ])


# ---------------------------------------------------------------------------
# Execution fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def local_executor() -> LocalProcessExecutor:
    return LocalProcessExecutor(GateConfig(default_shell="sh"))
