"""hookchain CLI - inspect the hooks configured for a command tree."""

import os
import sys
from typing import Optional, Sequence

import click

from .command import Command
from .config import ConfigManager
from .hooks import HookRegistry, apply_config_hooks, load_hooks_from_config
from .ui import (
    PALETTE,
    configure_logging,
    console,
    render_command_tree,
    render_error,
    render_hooks_table,
)


class HookchainApp:
    """The hookchain command tree, its registry and its configuration.

    The CLI runs on hookchain itself: shell hooks from the config file are
    attached to these commands, so ``hookchain hooks`` with a pre_run hook
    on ``hooks`` runs that hook first.
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config = ConfigManager(config_path)
        self.defaults = self.config.get_defaults()
        self.definitions = load_hooks_from_config(
            self.config.get_hooks_config(),
            default_timeout=self.defaults["timeout"],
        )
        self.root = self._build_tree()
        self.registry = HookRegistry(self.root)
        self.registry.on_persistent_pre_run(self.root, self._setup_logging, run_on_help=True)
        apply_config_hooks(self.registry, self.root, self.definitions)

    def _build_tree(self) -> Command:
        root = Command(
            "hookchain",
            help="HOOKCHAIN - lifecycle hooks for command trees.",
            params=[
                click.Option(
                    ["--verbose", "-v"],
                    is_flag=True,
                    is_eager=True,
                    help="Log hook activity to stderr.",
                ),
            ],
        )
        root.add_command(
            Command("config", help="Show configuration.", run=self.show_config),
            Command("hooks", help="List hooks defined in the config file.", run=self.list_hooks),
            Command(
                "tree",
                help="Show the command tree and the hooks on each command.",
                run=self.show_tree,
            ),
        )
        return root

    def _setup_logging(self, cmd: Command, args: list) -> None:
        # --help fires while parsing, before the group callback fills root.flags
        ctx = click.get_current_context(silent=True)
        params = ctx.find_root().params if ctx is not None else self.root.flags
        verbose = params.get("verbose") or self.defaults.get("verbose", False)
        configure_logging(bool(verbose))

    def show_config(self, cmd: Command, args: list) -> None:
        console.print(f"Config file: {self.config.config_path}")
        console.print(f"Configured hooks: {len(self.definitions)}")
        console.print(f"Registered hooks: {self.registry.hook_count}")
        console.print(f"Default timeout: {self.defaults['timeout']}s")

    def list_hooks(self, cmd: Command, args: list) -> None:
        console.print(f"\nConfigured hooks ({len(self.definitions)}):\n", style=f"bold {PALETTE.accent}")
        render_hooks_table([
            {
                "name": d.name,
                "phase": d.phase.value,
                "command": d.command_path,
                "run": d.run,
                "enabled": d.enabled,
            }
            for d in self.definitions
        ])

    def show_tree(self, cmd: Command, args: list) -> None:
        render_command_tree(self.root, self.registry)

    def run(self, args: Optional[Sequence[str]] = None, standalone_mode: bool = True):
        return self.root.execute(args, standalone_mode=standalone_mode)


def main(args: Optional[Sequence[str]] = None) -> None:
    """Console script entry point. HOOKCHAIN_CONFIG overrides the config path."""
    try:
        app = HookchainApp(os.environ.get("HOOKCHAIN_CONFIG"))
    except click.ClickException as e:
        render_error(e.format_message(), hint="Fix the file or point HOOKCHAIN_CONFIG at another one.")
        sys.exit(e.exit_code)
    app.run(args)


if __name__ == "__main__":
    main()
