"""Hook registry: ordered hooks per phase, keyed by owning command."""

import logging
from typing import TYPE_CHECKING, Callable, Optional, Union

from .adapter import install_adapter
from .help import install_help_pathway
from .records import HookOptions, HookPhase, HookRecord, callback_name

if TYPE_CHECKING:
    from ..command import Command

_log = logging.getLogger(__name__)

HookCallback = Callable[["Command", list], object]


class HookRegistry:
    """Hooks registered against one command tree.

    Create it with the root of the tree to install the help pathway up
    front; otherwise it is attached lazily the first time a hook that
    concerns help is registered.

    Usage:
        registry = HookRegistry(root)

        @registry.on_persistent_pre_run(root)
        def load_profile(cmd, args):
            ...

        registry.on_pre_run(child, check_args, run_on_help=True)
    """

    def __init__(self, root: Optional["Command"] = None):
        self._records: dict[HookPhase, dict["Command", list[HookRecord]]] = {
            phase: {} for phase in HookPhase
        }
        self._installed: set[tuple["Command", HookPhase]] = set()
        self._help_root: Optional["Command"] = None
        if root is not None:
            self.attach(root)

    # -- queries --------------------------------------------------------

    @property
    def hook_count(self) -> int:
        return sum(
            len(records)
            for by_node in self._records.values()
            for records in by_node.values()
        )

    @property
    def help_root(self) -> Optional["Command"]:
        return self._help_root

    def records(self, phase: Union[HookPhase, str], node: "Command") -> tuple[HookRecord, ...]:
        """Hooks owned by ``node`` for ``phase``, in registration order."""
        return tuple(self._records[HookPhase(phase)].get(node, ()))

    def is_installed(self, node: "Command", phase: Union[HookPhase, str]) -> bool:
        return (node, HookPhase(phase)) in self._installed

    def describe(self) -> list[dict]:
        """Return a summary of all hooks for display."""
        return [
            {
                "command": record.node.command_path,
                "phase": record.phase.value,
                "name": record.name,
                "run_on_help": record.run_on_help,
                "persistent": record.persistent,
            }
            for by_node in self._records.values()
            for records in by_node.values()
            for record in records
        ]

    # -- registration ---------------------------------------------------

    def attach(self, root: "Command") -> None:
        """Install the help pathway on ``root``. Later calls are no-ops."""
        if self._help_root is not None:
            if root is not self._help_root:
                _log.debug("Help pathway already on %r, ignoring %r", self._help_root, root)
            return
        install_help_pathway(self, root)
        self._help_root = root

    def register(
        self,
        phase: Union[HookPhase, str],
        node: "Command",
        callback: HookCallback,
        options: HookOptions = HookOptions(),
    ) -> HookRecord:
        """Register ``callback`` on ``node`` for ``phase``.

        ``persistent`` turns a pre_run or post_run registration into its
        cascading counterpart. On a help hook it makes the hook fire for
        help on descendants too.
        """
        phase = HookPhase(phase)
        if options.persistent:
            if phase is HookPhase.PRE_RUN:
                phase = HookPhase.PERSISTENT_PRE_RUN
            elif phase is HookPhase.POST_RUN:
                phase = HookPhase.PERSISTENT_POST_RUN

        record = HookRecord(
            node=node,
            phase=phase,
            callback=callback,
            run_on_help=options.run_on_help,
            persistent=options.persistent,
            name=callback_name(callback),
        )
        self._records[phase].setdefault(node, []).append(record)

        if phase.has_slot and (node, phase) not in self._installed:
            install_adapter(self, node, phase)
            self._installed.add((node, phase))

        if options.run_on_help or phase is HookPhase.HELP:
            self.attach(node.root())

        return record

    def _on(self, phase, node, callback, run_on_help, persistent):
        options = HookOptions(run_on_help=run_on_help, persistent=persistent)
        if callback is None:
            def decorator(fn: HookCallback) -> HookCallback:
                self.register(phase, node, fn, options)
                return fn
            return decorator
        self.register(phase, node, callback, options)
        return callback

    def on_pre_run(self, node, callback=None, *, run_on_help=False, persistent=False):
        """Run ``callback`` before ``node`` runs. Decorator when callback is omitted."""
        return self._on(HookPhase.PRE_RUN, node, callback, run_on_help, persistent)

    def on_run(self, node, callback=None, *, run_on_help=False, persistent=False):
        """Run ``callback`` as part of ``node``'s run phase."""
        return self._on(HookPhase.RUN, node, callback, run_on_help, persistent)

    def on_post_run(self, node, callback=None, *, run_on_help=False, persistent=False):
        """Run ``callback`` after ``node`` runs."""
        return self._on(HookPhase.POST_RUN, node, callback, run_on_help, persistent)

    def on_persistent_pre_run(self, node, callback=None, *, run_on_help=False, persistent=False):
        """Run ``callback`` before ``node`` or any of its descendants runs."""
        return self._on(HookPhase.PERSISTENT_PRE_RUN, node, callback, run_on_help, persistent)

    def on_persistent_post_run(self, node, callback=None, *, run_on_help=False, persistent=False):
        """Run ``callback`` after ``node`` or any of its descendants runs."""
        return self._on(HookPhase.PERSISTENT_POST_RUN, node, callback, run_on_help, persistent)

    def on_help(self, node, callback=None, *, run_on_help=False, persistent=False):
        """Run ``callback`` when help is requested for ``node``.

        With ``persistent=True`` it also runs for help on descendants.
        """
        return self._on(HookPhase.HELP, node, callback, run_on_help, persistent)
