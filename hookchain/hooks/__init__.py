"""Lifecycle hook system for hookchain commands."""

from .records import HookPhase, HookOptions, HookRecord, HookError
from .registry import HookRegistry
from .resolver import (
    resolve,
    resolve_chain,
    resolve_help,
    resolve_help_hooks,
    resolve_local,
    run_chain,
)
from .shell import ShellHook, ShellHookDefinition
from .loader import ConfigError, apply_config_hooks, load_hooks_from_config

__all__ = [
    "HookPhase",
    "HookOptions",
    "HookRecord",
    "HookError",
    "HookRegistry",
    "resolve",
    "resolve_chain",
    "resolve_help",
    "resolve_help_hooks",
    "resolve_local",
    "run_chain",
    "ShellHook",
    "ShellHookDefinition",
    "ConfigError",
    "apply_config_hooks",
    "load_hooks_from_config",
]
