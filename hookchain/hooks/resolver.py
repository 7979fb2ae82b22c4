"""Resolve which hooks run, and in what order, for an invoked command.

All functions here are pure reads of the registry. Execution lives in
``run_chain``.
"""

import logging
from typing import TYPE_CHECKING, Iterable

import click

from .records import HookError, HookPhase, HookRecord

if TYPE_CHECKING:
    from ..command import Command
    from .registry import HookRegistry

_log = logging.getLogger(__name__)


def resolve_local(
    registry: "HookRegistry",
    phase: HookPhase,
    node: "Command",
    help_only: bool = False,
) -> tuple[HookRecord, ...]:
    """Hooks owned by exactly ``node``, in registration order."""
    return tuple(
        r for r in registry.records(phase, node)
        if not help_only or r.run_on_help
    )


def resolve_chain(
    registry: "HookRegistry",
    phase: HookPhase,
    node: "Command",
    help_only: bool = False,
) -> tuple[HookRecord, ...]:
    """Hooks owned by ``node`` and its ancestors, root first.

    Each node contributes its own hooks in registration order, so a root
    with r1, r2 and a child with r3 resolves to (r1, r2, r3) for the child.
    """
    chain: list[HookRecord] = []
    for ancestor in reversed(list(node.lineage())):
        chain.extend(resolve_local(registry, phase, ancestor, help_only))
    return tuple(chain)


def resolve_help_hooks(registry: "HookRegistry", node: "Command") -> tuple[HookRecord, ...]:
    """Help hooks for ``node``, walking up to the root.

    The target's own help hooks always apply. An ancestor's help hooks
    apply only when registered as persistent.
    """
    hooks: list[HookRecord] = []
    for ancestor in node.lineage():
        for record in registry.records(HookPhase.HELP, ancestor):
            if ancestor is node or record.persistent:
                hooks.append(record)
    return tuple(hooks)


def resolve_help(registry: "HookRegistry", node: "Command") -> tuple[HookRecord, ...]:
    """Everything the help pathway runs before the original help renderer."""
    return (
        resolve_chain(registry, HookPhase.PERSISTENT_PRE_RUN, node, help_only=True)
        + resolve_local(registry, HookPhase.PRE_RUN, node, help_only=True)
        + resolve_help_hooks(registry, node)
    )


def resolve(registry: "HookRegistry", phase: HookPhase, node: "Command") -> tuple[HookRecord, ...]:
    """Ordered hooks for ``phase`` when ``node`` is the invoked command."""
    phase = HookPhase(phase)
    if phase is HookPhase.HELP:
        return resolve_help(registry, node)
    if phase.cascading:
        return resolve_chain(registry, phase, node)
    return resolve_local(registry, phase, node)


def run_chain(records: Iterable[HookRecord], node: "Command", args: list) -> None:
    """Run hooks in order. The first failure stops the chain and propagates.

    click's own exceptions pass through untouched; anything else is wrapped
    in a HookError so click reports it as a normal command error.
    """
    for record in records:
        try:
            record.callback(node, args)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            _log.debug("Hook %s on %r stopped the %s chain", record.name, node, record.phase.value)
            raise
        except Exception as e:
            _log.debug("Hook %s on %r failed: %s", record.name, node, e)
            raise HookError(f"{record.name} hook failed: {e}", record=record) from e
