#!/usr/bin/env python3
"""exec-gate quickstart.

Demonstrates the core workflow of the command gate:

1. Create a gate whose policy lives in a temporary directory.
2. Inspect the default policy that was installed.
3. Evaluate a few commands without running them.
4. Add a rule and run an allowed command.
5. Watch a prompt rule go through a confirmation handler.
6. Run a command that exceeds its timeout.

Run:
    python examples/quickstart.py
"""
from __future__ import annotations

import asyncio
import logging
import sys
import tempfile

from exec_gate import (
    CommandGate,
    CommandRequest,
    EvaluationResult,
    ExecAction,
    ExecRule,
    GateConfig,
)

SHELL = "cmd" if sys.platform == "win32" else "sh"


async def confirm(request: CommandRequest, evaluation: EvaluationResult) -> bool:
    print(f"    prompt: {request.command!r} matched {evaluation.matched_pattern!r} -> approving")
    return True


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")

    with tempfile.TemporaryDirectory() as data_dir:
        # -- Step 1: Create the gate -----------------------------------------
        config = GateConfig(data_dir=data_dir, default_shell=SHELL)
        gate = CommandGate.from_config(config, prompt_handler=confirm)
        print(f"[1] Gate created, policy at {config.policy_path}")

        # -- Step 2: Inspect the default policy ------------------------------
        engine = gate.engine
        print(f"[2] {len(engine.rules)} default rules, default action {engine.default_action}")

        # -- Step 3: Evaluate without running --------------------------------
        for command, shell in [
            ("Get-Process", "pwsh"),
            ("Remove-Item C:\\temp", "powershell"),
            ("curl http://example.com", SHELL),
            ("", SHELL),
        ]:
            decision = engine.evaluate(command, shell)
            print(f"[3] {command!r:32} on {shell:10} -> {decision.action} ({decision.reason})")

        # -- Step 4: Add a rule and run --------------------------------------
        engine.insert_rule(0, ExecRule(
            pattern="echo *", action=ExecAction.ALLOW, shells=[SHELL],
            description="Echo on the local shell",
        ))
        outcome = await gate.execute(CommandRequest(command="echo hello from exec-gate"))
        assert outcome.result is not None
        print(f"[4] exit_code={outcome.result.exit_code} stdout={outcome.result.stdout!r}")

        # -- Step 5: Prompt rule ---------------------------------------------
        engine.insert_rule(0, ExecRule(pattern="echo deploy*", action=ExecAction.PROMPT))
        outcome = await gate.execute(CommandRequest(command="echo deploy now"))
        print(f"[5] {outcome.evaluation.reason}; executed={outcome.executed}")

        # -- Step 6: Timeout -------------------------------------------------
        engine.insert_rule(0, ExecRule(pattern="sleep *", action=ExecAction.ALLOW))
        if SHELL == "sh":
            outcome = await gate.execute(
                CommandRequest(command="sleep 10", timeout_ms=200),
            )
            assert outcome.result is not None
            print(
                f"[6] timed_out={outcome.result.timed_out} "
                f"exit_code={outcome.result.exit_code} "
                f"duration_ms={outcome.result.duration_ms}"
            )

    print("\nDone.")


if __name__ == "__main__":
    asyncio.run(main())
