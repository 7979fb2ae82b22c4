"""Help pathway: run hooks before help is rendered for any command."""

import logging
from typing import TYPE_CHECKING

from .resolver import resolve_help, run_chain

if TYPE_CHECKING:
    from ..command import Command, SlotCallback
    from .registry import HookRegistry

_log = logging.getLogger(__name__)


def install_help_pathway(registry: "HookRegistry", root: "Command") -> "SlotCallback":
    """Wrap the help function of ``root``, inherited by the whole tree.

    On help for any command the wrapper runs, in order: persistent pre-run
    hooks marked run_on_help (root first), the command's own pre-run hooks
    marked run_on_help, then help hooks (the command's own, plus persistent
    ones from its ancestors). The original help renderer runs last. If any
    hook fails, the error propagates and no help text is rendered.
    """
    original = root.help_func()

    def help_pathway(cmd: "Command", args: list) -> None:
        run_chain(resolve_help(registry, cmd), cmd, args)
        original(cmd, args)

    help_pathway.original = original
    root.set_help_func(help_pathway)
    _log.debug("Installed help pathway on %r", root)
    return help_pathway
