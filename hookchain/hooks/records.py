"""Hook phases, options and records."""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional

import click

if TYPE_CHECKING:
    from ..command import Command


class HookPhase(str, Enum):
    """Lifecycle phases a hook can attach to."""

    PRE_RUN = "pre_run"
    RUN = "run"
    POST_RUN = "post_run"
    PERSISTENT_PRE_RUN = "persistent_pre_run"
    PERSISTENT_POST_RUN = "persistent_post_run"
    HELP = "help"

    @property
    def cascading(self) -> bool:
        """Whether hooks in this phase fire for descendants of their node."""
        return self in (HookPhase.PERSISTENT_PRE_RUN, HookPhase.PERSISTENT_POST_RUN)

    @property
    def has_slot(self) -> bool:
        """Whether the phase maps onto a command callback slot."""
        return self is not HookPhase.HELP


@dataclass(frozen=True)
class HookOptions:
    """Registration options shared by every phase."""

    run_on_help: bool = False
    persistent: bool = False


@dataclass(frozen=True, eq=False)
class HookRecord:
    """One registered hook. Identity equality, never mutated or removed."""

    node: "Command"
    phase: HookPhase
    callback: Callable[["Command", list], Any]
    run_on_help: bool = False
    persistent: bool = False
    name: str = ""


class HookError(click.ClickException):
    """A hook failed. Aborts the rest of its chain."""

    exit_code = 1

    def __init__(self, message: str, record: Optional[HookRecord] = None):
        super().__init__(message)
        self.record = record


def callback_name(callback: Callable) -> str:
    """Readable name for a hook callback."""
    name = getattr(callback, "__qualname__", None) or getattr(callback, "name", None)
    return name or repr(callback)
