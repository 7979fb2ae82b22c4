"""Lifecycle adapters: one callback per command slot fanning out to hooks."""

import logging
from typing import TYPE_CHECKING, Optional

from .records import HookPhase
from .resolver import resolve, run_chain

if TYPE_CHECKING:
    from ..command import Command, SlotCallback
    from .registry import HookRegistry

_log = logging.getLogger(__name__)


def make_adapter(
    registry: "HookRegistry",
    phase: HookPhase,
    previous: Optional["SlotCallback"] = None,
) -> "SlotCallback":
    """Build the slot callback for ``phase``.

    The adapter resolves hooks against the invoked command on every call, so
    hooks registered after installation still run. A callback that already
    occupied the slot runs after the hooks, and is skipped when one fails.
    """
    def adapter(cmd: "Command", args: list) -> None:
        run_chain(resolve(registry, phase, cmd), cmd, args)
        if previous is not None:
            previous(cmd, args)

    adapter.phase = phase
    adapter.previous = previous
    return adapter


def install_adapter(registry: "HookRegistry", node: "Command", phase: HookPhase) -> None:
    """Put an adapter into ``node``'s slot for ``phase``."""
    previous = node.slot(phase.value)
    node.set_slot(phase.value, make_adapter(registry, phase, previous))
    _log.debug(
        "Installed %s adapter on %r%s",
        phase.value, node, " (wrapping existing callback)" if previous else "",
    )
