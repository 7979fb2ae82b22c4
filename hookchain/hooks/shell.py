"""Shell command hooks.

A ShellHook runs a shell command when its phase fires, with HOOKCHAIN_*
environment variables describing the invocation. Its stdout is echoed
through the command's output channel; a non-zero exit or a timeout fails
the hook.
"""

import os
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .records import HookError, HookPhase

if TYPE_CHECKING:
    from ..command import Command


@dataclass(frozen=True)
class ShellHookDefinition:
    """A single shell hook configuration."""

    name: str
    phase: HookPhase
    command_path: str
    run: str
    timeout: int = 30
    enabled: bool = True
    run_on_help: bool = False
    persistent: bool = False
    env: dict = field(default_factory=dict, hash=False)


class ShellHook:
    """Hook callback executing a ShellHookDefinition."""

    def __init__(self, definition: ShellHookDefinition):
        self.definition = definition

    @property
    def name(self) -> str:
        return self.definition.name

    def __repr__(self) -> str:
        return f"ShellHook({self.definition.name!r})"

    def build_env(self, cmd: "Command", args: list) -> dict:
        env = dict(os.environ)
        env.update({k: str(v) for k, v in self.definition.env.items()})
        env["HOOKCHAIN_HOOK"] = self.definition.name
        env["HOOKCHAIN_PHASE"] = self.definition.phase.value
        env["HOOKCHAIN_COMMAND"] = cmd.command_path
        env["HOOKCHAIN_ARGS"] = shlex.join(args)
        return env

    def __call__(self, cmd: "Command", args: list) -> None:
        hook = self.definition
        start = time.monotonic()
        try:
            proc = subprocess.run(
                hook.run,
                shell=True,
                capture_output=True,
                text=True,
                timeout=hook.timeout,
                env=self.build_env(cmd, args),
            )
        except subprocess.TimeoutExpired:
            raise HookError(f"Hook {hook.name} timed out after {hook.timeout}s")
        except OSError as e:
            raise HookError(f"Hook {hook.name} failed: {e}")

        output = proc.stdout.strip()
        if output:
            cmd.echo(output)

        if proc.returncode != 0:
            detail = proc.stderr.strip() or f"exit code {proc.returncode}"
            duration = round(time.monotonic() - start, 3)
            raise HookError(f"Hook {hook.name} failed after {duration}s: {detail}")
