"""exec-gate configuration.

Defines the validated configuration model read by the policy engine
factory and the local executor.
"""
from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

from exec_gate.core.types import DEFAULT_SHELL


class GateConfig(BaseModel):
    """Configuration for a command gate.

    All fields carry defaults so that ``GateConfig()`` is usable as-is;
    hosts normally only override ``data_dir``.
    """

    model_config = ConfigDict(strict=True)

    data_dir: str = Field(
        default="~/.exec-gate",
        description="Directory holding the persisted policy document.",
    )
    policy_file_name: str = Field(
        default="exec-policy.json",
        min_length=1,
        description="File name of the policy document inside data_dir.",
    )
    default_shell: str = Field(
        default=DEFAULT_SHELL,
        description="Shell used when a request does not name one.",
    )
    default_timeout_ms: int = Field(
        default=0,
        ge=0,
        description=(
            "Timeout applied to requests that ask for none (timeout_ms=0). "
            "0 keeps such requests unbounded."
        ),
    )
    kill_grace_s: float = Field(
        default=2.0,
        gt=0.0,
        description=(
            "Seconds to wait for a killed process tree to be reaped "
            "before the result is reported anyway."
        ),
    )

    @property
    def policy_path(self) -> str:
        """Return the expanded path of the policy document."""
        return os.path.join(os.path.expanduser(self.data_dir), self.policy_file_name)
