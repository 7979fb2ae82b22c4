"""Parse shell hook definitions from configuration data."""

from typing import TYPE_CHECKING, Any, Iterable

import click

from .records import HookOptions, HookPhase
from .shell import ShellHook, ShellHookDefinition

if TYPE_CHECKING:
    from ..command import Command
    from .registry import HookRegistry


_PHASE_MAP = {phase.value: phase for phase in HookPhase}


class ConfigError(click.ClickException):
    """Configuration could not be used."""


def load_hooks_from_config(
    hooks_data: list[dict[str, Any]],
    default_timeout: int = 30,
) -> tuple[ShellHookDefinition, ...]:
    """Parse a list of hook config dicts into ShellHookDefinition instances.

    Each dict should have:
        name: str (required)
        phase: str (required) - one of pre_run, run, post_run,
            persistent_pre_run, persistent_post_run, help
        run: str (required) - shell command
        command: str (optional, default "") - command path below the root
        timeout: int (optional, default ``default_timeout``)
        enabled: bool (optional, default True)
        run_on_help: bool (optional, default False)
        persistent: bool (optional, default False)
        env: dict (optional)

    Invalid entries are silently skipped.
    """
    hooks = []

    for entry in hooks_data or ():
        if not isinstance(entry, dict):
            continue

        name = entry.get("name")
        phase_str = entry.get("phase")
        run = entry.get("run")

        if not all((name, phase_str, run)):
            continue

        phase = _PHASE_MAP.get(phase_str)
        if phase is None:
            continue

        env = entry.get("env") or {}
        if not isinstance(env, dict):
            continue

        hooks.append(ShellHookDefinition(
            name=name,
            phase=phase,
            command_path=entry.get("command") or "",
            run=run,
            timeout=entry.get("timeout", default_timeout),
            enabled=entry.get("enabled", True),
            run_on_help=bool(entry.get("run_on_help", False)),
            persistent=bool(entry.get("persistent", False)),
            env=env,
        ))

    return tuple(hooks)


def apply_config_hooks(
    registry: "HookRegistry",
    root: "Command",
    definitions: Iterable[ShellHookDefinition],
) -> int:
    """Register enabled definitions on the commands they name.

    Returns the number of hooks registered. Raises ConfigError when a
    definition names a command that does not exist.
    """
    count = 0
    for definition in definitions:
        if not definition.enabled:
            continue
        node = root.find(definition.command_path)
        if node is None:
            raise ConfigError(
                f"Hook {definition.name!r} targets unknown command "
                f"{definition.command_path!r}"
            )
        registry.register(
            definition.phase,
            node,
            ShellHook(definition),
            HookOptions(
                run_on_help=definition.run_on_help,
                persistent=definition.persistent,
            ),
        )
        count += 1
    return count
