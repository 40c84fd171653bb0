"""Policy engine -- ordered, persisted, first-match-wins command rules.

Usage::

    engine = PolicyEngine(JsonPolicyStore("~/.exec-gate/exec-policy.json"))
    decision = engine.evaluate("Get-Process", shell="pwsh")
    if decision.allowed:
        ...

Evaluation order
----------------
1. Empty / whitespace-only commands are denied without consulting rules.
2. Rules are scanned in list order; disabled rules and rules scoped to
   other shells are skipped.
3. The first rule whose glob pattern matches decides the outcome.
4. If nothing matches, the default action applies.

Every evaluation is logged (outcome, matched pattern or ``default``, and
the literal command) on this module's logger; that line is the audit
trail of the gate.

Concurrency
-----------
A single re-entrant lock guards the rule list, the default action and
the matcher cache.  Evaluation and mutation both take it, so an
evaluation never observes a rule list mid-mutation.  Mutations persist
through the store while holding the lock; that write is blocking file
I/O.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

from exec_gate.core.errors import PolicyLoadError, PolicySaveError
from exec_gate.core.types import (
    DEFAULT_SHELL,
    EvaluationResult,
    ExecAction,
    ExecRule,
    PolicyDocument,
)
from exec_gate.policy.defaults import DEFAULT_ACTION, default_rules
from exec_gate.policy.matcher import RuleMatcher
from exec_gate.policy.store import JsonPolicyStore

if TYPE_CHECKING:
    from exec_gate.core.config import GateConfig
    from exec_gate.core.interfaces import PolicyStore

logger = logging.getLogger(__name__)

EMPTY_COMMAND_REASON = "Empty command"
DEFAULT_POLICY_REASON = "No matching rule; default policy applied"


class PolicyEngine:
    """Evaluate commands against an ordered rule list and persist mutations.

    Parameters
    ----------
    store:
        Backing :class:`~exec_gate.core.interfaces.PolicyStore`.
    matcher:
        Optional :class:`RuleMatcher`; a private one is created by default.
    auto_load:
        If ``True`` (default), :meth:`load` runs during construction, so a
        missing or corrupt document is replaced by the default policy
        straight away.
    """

    def __init__(
        self,
        store: PolicyStore,
        *,
        matcher: RuleMatcher | None = None,
        auto_load: bool = True,
    ) -> None:
        self._store = store
        self._matcher = matcher or RuleMatcher()
        self._lock = threading.RLock()
        self._rules: list[ExecRule] = []
        self._default_action: ExecAction = DEFAULT_ACTION

        if auto_load:
            self.load()

    @classmethod
    def from_config(cls, config: GateConfig) -> PolicyEngine:
        """Build an engine backed by the JSON document at ``config.policy_path``."""
        return cls(JsonPolicyStore(config.policy_path))

    # -- Introspection ------------------------------------------------------

    @property
    def store(self) -> PolicyStore:
        return self._store

    @property
    def matcher(self) -> RuleMatcher:
        return self._matcher

    @property
    def rules(self) -> tuple[ExecRule, ...]:
        """Return a snapshot of the rules in evaluation order."""
        with self._lock:
            return tuple(r.model_copy(deep=True) for r in self._rules)

    @property
    def default_action(self) -> ExecAction:
        """Return the action applied when no rule matches."""
        with self._lock:
            return self._default_action

    def get_policy_document(self) -> PolicyDocument:
        """Return a detached snapshot of the current policy."""
        with self._lock:
            return self._snapshot()

    # -- Evaluation ---------------------------------------------------------

    def evaluate(self, command: str | None, shell: str | None = None) -> EvaluationResult:
        """Decide whether *command* may run under *shell*. First match wins.

        Never raises for bad input: empty commands are denied.
        """
        if command is None or not command.strip():
            logger.info("[EXEC-POLICY] DENY: %r (empty command)", command)
            return EvaluationResult(
                allowed=False,
                action=ExecAction.DENY,
                reason=EMPTY_COMMAND_REASON,
            )

        normalized_shell = (shell or DEFAULT_SHELL).lower()

        with self._lock:
            for rule in self._rules:
                if not rule.enabled:
                    continue
                if not rule.applies_to_shell(normalized_shell):
                    continue
                if self._matcher.matches(command, rule.pattern):
                    logger.info(
                        "[EXEC-POLICY] %s: %r matched rule %r",
                        rule.action.value.upper(), command, rule.pattern,
                    )
                    return EvaluationResult(
                        allowed=rule.action == ExecAction.ALLOW,
                        action=rule.action,
                        matched_pattern=rule.pattern,
                        reason=rule.description or f"Matched rule: {rule.pattern}",
                    )

            default_action = self._default_action

        logger.info(
            "[EXEC-POLICY] %s: %r matched default (no rule matched)",
            default_action.value.upper(), command,
        )
        return EvaluationResult(
            allowed=default_action == ExecAction.ALLOW,
            action=default_action,
            reason=DEFAULT_POLICY_REASON,
        )

    # -- Mutation -----------------------------------------------------------

    def add_rule(self, rule: ExecRule) -> None:
        """Append *rule* and persist."""
        with self._lock:
            self._rules.append(rule.model_copy(deep=True))
            self._changed()

    def insert_rule(self, index: int, rule: ExecRule) -> None:
        """Insert *rule* at *index* (clamped into ``[0, len]``) and persist."""
        with self._lock:
            index = max(0, min(index, len(self._rules)))
            self._rules.insert(index, rule.model_copy(deep=True))
            self._changed()

    def remove_rule(self, index: int) -> bool:
        """Remove the rule at *index* and persist.

        Returns ``False`` -- without touching the store -- if *index* is
        out of range.  Negative indices are out of range.
        """
        with self._lock:
            if index < 0 or index >= len(self._rules):
                return False
            removed = self._rules.pop(index)
            logger.debug("[EXEC-POLICY] Removed rule %d (%r)", index, removed.pattern)
            self._changed()
            return True

    def set_rules(
        self,
        rules: Iterable[ExecRule],
        default_action: ExecAction | None = None,
    ) -> None:
        """Replace every rule (and optionally the default action) and persist."""
        with self._lock:
            self._rules = [r.model_copy(deep=True) for r in rules]
            if default_action is not None:
                self._default_action = ExecAction(default_action)
            self._changed()

    def set_default_action(self, action: ExecAction) -> None:
        """Change the action applied when no rule matches, and persist."""
        with self._lock:
            self._default_action = ExecAction(action)
            self._changed()

    # -- Persistence --------------------------------------------------------

    def load(self) -> None:
        """Replace the in-memory policy with the persisted document.

        On any failure, including an unexpected exception from a custom
        store, the default policy is installed and immediately persisted,
        so the next load is stable.
        """
        with self._lock:
            try:
                document = self._store.load()
            except PolicyLoadError as exc:
                logger.warning(
                    "[EXEC-POLICY] %s Failed to load policy: %s. %s",
                    exc.code, exc.message, exc.resolution,
                )
            except Exception as exc:
                logger.warning(
                    "[EXEC-POLICY] Failed to load policy from %s: %r",
                    self._store.location, exc,
                )
            else:
                self._rules = list(document.rules)
                self._default_action = document.default_action
                self._matcher.clear_cache()
                logger.info(
                    "[EXEC-POLICY] Loaded %d rules from %s",
                    len(self._rules), self._store.location,
                )
                return

            self._rules = default_rules()
            self._default_action = DEFAULT_ACTION
            self._matcher.clear_cache()
            logger.info("[EXEC-POLICY] Using default policy")
            self.save()

    def save(self) -> bool:
        """Persist the current policy.

        Failures are logged, never raised: the in-memory policy stays
        authoritative for this process.  Returns ``True`` if the document
        was written.
        """
        with self._lock:
            try:
                self._store.save(self._snapshot())
            except PolicySaveError as exc:
                logger.error(
                    "[EXEC-POLICY] %s Failed to save: %s. %s",
                    exc.code, exc.message, exc.resolution,
                )
                return False
            return True

    # -- Internal helpers ---------------------------------------------------

    def _snapshot(self) -> PolicyDocument:
        return PolicyDocument(
            default_action=self._default_action,
            rules=[r.model_copy(deep=True) for r in self._rules],
        )

    def _changed(self) -> None:
        self._matcher.clear_cache()
        self.save()
