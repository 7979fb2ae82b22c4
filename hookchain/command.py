"""Command tree built on click.

A ``Command`` is one node of the CLI tree. It carries a parent link, one
callback slot per lifecycle phase and a replaceable help function. click does
the argument parsing and the default help formatting; this module only decides
which slots run, and in what order, once click has dispatched to a node.

Lifecycle for the invoked node:

    persistent_pre_run   nearest slot walking from the node up to the root
    pre_run              the node's own slot
    run                  the node's own slot (no run -> help is shown)
    post_run             the node's own slot
    persistent_post_run  nearest slot walking from the node up to the root

Every slot is called as ``slot(command, args)``. Raising aborts the rest.
"""

from typing import Callable, Iterator, Optional, Sequence, TextIO

import click

SlotCallback = Callable[["Command", list], None]

SLOT_NAMES = (
    "persistent_pre_run",
    "pre_run",
    "run",
    "post_run",
    "persistent_post_run",
)

HELP_OPTION_NAMES = ["-h", "--help"]


def default_help(cmd: "Command", args: Sequence[str]) -> None:
    """Render click's formatted help for ``cmd``."""
    ctx = cmd.help_context()
    cmd.echo(ctx.get_help())


class _NodeMixin:
    """Routes click's ``--help`` through the node's help function."""

    def __init__(self, node: "Command", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.node = node
        self._node_help_option: Optional[click.Option] = None

    def get_help_option(self, ctx: click.Context) -> Optional[click.Option]:
        help_options = self.get_help_option_names(ctx)
        if not help_options or not self.add_help_option:
            return None

        # click orders eager callbacks by object identity, keep one instance
        if self._node_help_option is None:
            self._node_help_option = click.Option(
                help_options,
                is_flag=True,
                is_eager=True,
                expose_value=False,
                callback=self._show_help,
                help="Show this message and exit.",
            )
        return self._node_help_option

    def _show_help(self, ctx: click.Context, param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        self.node.show_help()
        ctx.exit()


class _NodeCommand(_NodeMixin, click.Command):
    pass


class _NodeGroup(_NodeMixin, click.Group):
    """A group whose own run slot can take positional arguments.

    When the node is runnable and the first argument names no child, the
    arguments go to the node itself through ``lifecycle_command``.
    """

    lifecycle_command: Optional[click.Command] = None

    def resolve_command(self, ctx: click.Context, args: list):
        if (
            self.lifecycle_command is not None
            and self.node.runnable
            and args
            and self.get_command(ctx, args[0]) is None
        ):
            return self.name, self.lifecycle_command, args
        return super().resolve_command(ctx, args)


class Command:
    """A node in the command tree."""

    def __init__(
        self,
        name: str,
        help: Optional[str] = None,
        short_help: Optional[str] = None,
        params: Optional[list[click.Parameter]] = None,
        persistent_pre_run: Optional[SlotCallback] = None,
        pre_run: Optional[SlotCallback] = None,
        run: Optional[SlotCallback] = None,
        post_run: Optional[SlotCallback] = None,
        persistent_post_run: Optional[SlotCallback] = None,
    ):
        self.name = name
        self.help = help
        self.short_help = short_help
        self.params = list(params or [])
        self.parent: Optional[Command] = None
        self.commands: dict[str, Command] = {}
        self.flags: dict = {}

        self.persistent_pre_run = persistent_pre_run
        self.pre_run = pre_run
        self.run = run
        self.post_run = post_run
        self.persistent_post_run = persistent_post_run

        self._help_func: Optional[SlotCallback] = None
        self._out: Optional[TextIO] = None
        self._click_command: Optional[click.Command] = None

    def __repr__(self) -> str:
        return f"Command({self.path or self.name!r})"

    # -- tree -----------------------------------------------------------

    def add_command(self, *commands: "Command") -> None:
        """Attach child commands. A command can have only one parent."""
        for cmd in commands:
            if cmd is self:
                raise ValueError("a command cannot be its own child")
            if cmd.parent is not None and cmd.parent is not self:
                raise ValueError(f"{cmd.name!r} already belongs to {cmd.parent.name!r}")
            cmd.parent = self
            self.commands[cmd.name] = cmd

    def lineage(self) -> Iterator["Command"]:
        """Yield this command, then its parent, up to and including the root."""
        node: Optional[Command] = self
        while node is not None:
            yield node
            node = node.parent

    def root(self) -> "Command":
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def runnable(self) -> bool:
        return self.run is not None

    @property
    def path(self) -> str:
        """Space separated names below the root, empty for the root itself."""
        names = [node.name for node in self.lineage()][:-1]
        return " ".join(reversed(names))

    @property
    def command_path(self) -> str:
        """Full invocation path including the root name."""
        return " ".join(reversed([node.name for node in self.lineage()]))

    def find(self, path) -> Optional["Command"]:
        """Look up a descendant by a space separated path or a list of names."""
        names = path.split() if isinstance(path, str) else list(path)
        node = self
        for name in names:
            node = node.commands.get(name)
            if node is None:
                return None
        return node

    # -- slots ----------------------------------------------------------

    def slot(self, name: str) -> Optional[SlotCallback]:
        if name not in SLOT_NAMES:
            raise KeyError(name)
        return getattr(self, name)

    def set_slot(self, name: str, callback: Optional[SlotCallback]) -> None:
        if name not in SLOT_NAMES:
            raise KeyError(name)
        setattr(self, name, callback)

    def help_func(self) -> SlotCallback:
        """The help function in effect: own, inherited, or the default."""
        for node in self.lineage():
            if node._help_func is not None:
                return node._help_func
        return default_help

    def set_help_func(self, func: Optional[SlotCallback]) -> None:
        self._help_func = func

    def show_help(self, args: Sequence[str] = ()) -> None:
        self.help_func()(self, list(args))

    # -- output ---------------------------------------------------------

    def output(self) -> Optional[TextIO]:
        for node in self.lineage():
            if node._out is not None:
                return node._out
        return None

    def set_output(self, out: Optional[TextIO]) -> None:
        self._out = out

    def echo(self, message: str = "", nl: bool = True) -> None:
        """Write user-visible text to this command's output channel."""
        click.echo(message, file=self.output(), nl=nl)

    # -- click bridge ---------------------------------------------------

    def build(self) -> click.Command:
        """Build the click command for this node and its descendants."""
        context_settings = {
            "help_option_names": HELP_OPTION_NAMES,
            "ignore_unknown_options": True,
        }

        if self.commands:
            cmd = _NodeGroup(
                self,
                name=self.name,
                help=self.help,
                short_help=self.short_help,
                params=list(self.params),
                callback=self._group_callback,
                invoke_without_command=True,
                context_settings=context_settings,
            )
            for child in self.commands.values():
                cmd.add_command(child.build())
            if self.parent is None and "help" not in self.commands:
                cmd.add_command(self._help_command())
            cmd.lifecycle_command = self._args_command(self.name, dict(context_settings))
        else:
            cmd = self._args_command(self.name, context_settings, params=self.params)

        self._click_command = cmd
        return cmd

    def _args_command(self, name: str, context_settings: dict, params=()) -> click.Command:
        """Click command taking every remaining token as the node's args."""
        params = list(params)
        params.append(click.Argument(["args"], nargs=-1, type=click.UNPROCESSED))
        return _NodeCommand(
            self,
            name=name,
            help=self.help,
            short_help=self.short_help,
            params=params,
            callback=self._leaf_callback,
            context_settings=context_settings,
        )

    def help_context(self) -> click.Context:
        """A click context for this node, for rendering help outside a run."""
        current = click.get_current_context(silent=True)
        if current is not None and current.command is self._click_command:
            return current

        lineage = list(self.lineage())
        if any(node._click_command is None for node in lineage):
            self.root().build()

        ctx = None
        for node in reversed(lineage):
            ctx = click.Context(
                node._click_command,
                info_name=node.name,
                parent=ctx,
                **node._click_command.context_settings,
            )
        return ctx

    def execute(
        self,
        args: Optional[Sequence[str]] = None,
        standalone_mode: bool = True,
    ):
        """Parse ``args`` from the root and run the dispatched command."""
        root = self.root()
        return root.build().main(
            args=list(args) if args is not None else None,
            prog_name=root.name,
            standalone_mode=standalone_mode,
        )

    def _group_callback(self, **params) -> None:
        ctx = click.get_current_context()
        self.flags.update(params)
        if ctx.invoked_subcommand is None:
            self.run_lifecycle([])

    def _leaf_callback(self, args=(), **params) -> None:
        self.flags.update(params)
        self.run_lifecycle(list(args))

    def _help_command(self) -> click.Command:
        root = self

        @click.command(name="help", context_settings={"help_option_names": HELP_OPTION_NAMES})
        @click.argument("path", nargs=-1)
        def help_command(path):
            """Help about any command."""
            target = root.find(path)
            if target is None:
                raise click.UsageError(f"Unknown help topic {' '.join(path)!r}")
            target.show_help()

        return help_command

    # -- lifecycle ------------------------------------------------------

    def run_lifecycle(self, args: list) -> None:
        """Run every lifecycle slot for this command as the invoked node."""
        if not self.runnable:
            self.show_help(args)
            return

        for node in self.lineage():
            if node.persistent_pre_run is not None:
                node.persistent_pre_run(self, args)
                break

        if self.pre_run is not None:
            self.pre_run(self, args)

        self.run(self, args)

        if self.post_run is not None:
            self.post_run(self, args)

        for node in self.lineage():
            if node.persistent_post_run is not None:
                node.persistent_post_run(self, args)
                break
