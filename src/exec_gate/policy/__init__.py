"""Command approval policy.

This subpackage decides whether a command may run:

* **PolicyEngine** -- ordered, first-match-wins evaluation over glob
  rules, with mutation operations that persist immediately.
* **RuleMatcher** -- glob -> anchored, case-insensitive regex with a
  per-instance compilation cache.
* **JsonPolicyStore** -- the durable JSON policy document.
* **default_rules** -- the curated allow/deny list installed when no
  valid document exists (default action: deny).
"""
from __future__ import annotations

from exec_gate.policy.defaults import (
    DEFAULT_ACTION,
    DEFAULT_RULE_COUNT,
    default_document,
    default_rules,
)
from exec_gate.policy.engine import (
    DEFAULT_POLICY_REASON,
    EMPTY_COMMAND_REASON,
    PolicyEngine,
)
from exec_gate.policy.matcher import RuleMatcher, glob_to_regex
from exec_gate.policy.store import JsonPolicyStore, dump_document, parse_document

__all__ = [
    "DEFAULT_ACTION",
    "DEFAULT_POLICY_REASON",
    "DEFAULT_RULE_COUNT",
    "EMPTY_COMMAND_REASON",
    "JsonPolicyStore",
    "PolicyEngine",
    "RuleMatcher",
    "default_document",
    "default_rules",
    "dump_document",
    "glob_to_regex",
    "parse_document",
]
