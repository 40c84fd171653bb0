"""Built-in default policy.

Installed whenever the persisted policy cannot be loaded.  The structure
is the security contract of the gate:

1. **Allow** a curated list of read-only / diagnostic commands.
2. **Deny** a curated list of destructive or high-risk operations,
   using leading/trailing wildcards to catch variants.
3. **Default deny** for everything else.

Rules are matched against the whole command string in order, so a
compound command such as ``cat x; Remove-Item y`` is admitted by
``cat *`` before any deny rule is consulted.
"""
from __future__ import annotations

from exec_gate.core.types import ExecAction, ExecRule, PolicyDocument

DEFAULT_ACTION = ExecAction.DENY

_POWERSHELL_FAMILY = ("powershell", "pwsh")

# (pattern, action, shells, description)
_DEFAULT_RULES: tuple[tuple[str, ExecAction, tuple[str, ...] | None, str], ...] = (
    # -- Read-only / diagnostic ---------------------------------------------
    ("echo *", ExecAction.ALLOW, None, "Echo commands"),
    ("Get-*", ExecAction.ALLOW, _POWERSHELL_FAMILY, "PowerShell Get- cmdlets (read-only)"),
    ("dir *", ExecAction.ALLOW, None, "Directory listing"),
    ("hostname", ExecAction.ALLOW, None, "Hostname query"),
    ("whoami", ExecAction.ALLOW, None, "Current user"),
    ("systeminfo", ExecAction.ALLOW, None, "System info"),
    ("ipconfig *", ExecAction.ALLOW, None, "Network config"),
    ("ping *", ExecAction.ALLOW, None, "Ping"),
    ("type *", ExecAction.ALLOW, ("cmd",), "Read file (cmd)"),
    ("cat *", ExecAction.ALLOW, None, "Read file"),
    # -- Destructive / high-risk --------------------------------------------
    ("Remove-Item *", ExecAction.DENY, None, "Block file deletion"),
    ("rm *", ExecAction.DENY, None, "Block rm"),
    ("del *", ExecAction.DENY, None, "Block del"),
    ("Format-*", ExecAction.DENY, None, "Block format commands"),
    ("Stop-Computer*", ExecAction.DENY, None, "Block shutdown"),
    ("Restart-Computer*", ExecAction.DENY, None, "Block restart"),
    ("*Invoke-WebRequest*", ExecAction.DENY, None, "Block web downloads"),
    ("*Start-Process*", ExecAction.DENY, None, "Block process launch"),
    ("*reg *", ExecAction.DENY, None, "Block registry edits"),
    ("shutdown*", ExecAction.DENY, None, "Block shutdown"),
    ("net *", ExecAction.DENY, None, "Block net commands"),
)

DEFAULT_RULE_COUNT = len(_DEFAULT_RULES)


def default_rules() -> list[ExecRule]:
    """Return fresh copies of the curated default rules, in order."""
    return [
        ExecRule(
            pattern=pattern,
            action=action,
            shells=list(shells) if shells else None,
            description=description,
        )
        for pattern, action, shells, description in _DEFAULT_RULES
    ]


def default_document() -> PolicyDocument:
    """Return the default policy document (curated rules, default deny)."""
    return PolicyDocument(default_action=DEFAULT_ACTION, rules=default_rules())
