"""hookchain - multi-subscriber lifecycle hooks for click command trees."""

__version__ = "0.1.0"

from .command import Command
from .hooks import (
    HookError,
    HookOptions,
    HookPhase,
    HookRecord,
    HookRegistry,
)
from .config import ConfigManager

__all__ = [
    "Command",
    "HookError",
    "HookOptions",
    "HookPhase",
    "HookRecord",
    "HookRegistry",
    "ConfigManager",
]
