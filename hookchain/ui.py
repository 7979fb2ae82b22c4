"""Terminal rendering for the hookchain CLI."""

import logging
from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text
from rich.tree import Tree

from .hooks import HookPhase


@dataclass(frozen=True)
class ColorPalette:
    """Core UI color palette."""

    text_bright: str = "#e8e8f0"
    text: str = "#b8b8cc"
    text_dim: str = "#4a4a60"
    text_muted: str = "#363648"
    accent: str = "#00d4e5"
    secondary: str = "#b44dff"
    error: str = "#e55a6e"


PALETTE = ColorPalette()

console = Console()


def render_error(message: str, hint: Optional[str] = None) -> None:
    """Print a failure line, plus an optional dimmed hint below it."""
    line = Text.assemble(
        ("error", f"bold {PALETTE.error}"),
        (": ", PALETTE.text_muted),
        (message, PALETTE.text_bright),
    )
    console.print(line)
    if hint:
        console.print(Text(f"  {hint}", style=PALETTE.text_dim))


def render_hooks_table(rows: list[dict]) -> None:
    """Render a borderless, whitespace-aligned hook table.

    Each row needs name, phase, command and enabled; disabled rows are dimmed.
    """
    col_name = 18
    col_phase = 22
    col_command = 20

    header = Text()
    header.append("  ")
    header.append("NAME".ljust(col_name), style=f"dim {PALETTE.text_muted}")
    header.append("PHASE".ljust(col_phase), style=f"dim {PALETTE.text_muted}")
    header.append("COMMAND".ljust(col_command), style=f"dim {PALETTE.text_muted}")
    header.append("RUN", style=f"dim {PALETTE.text_muted}")
    console.print(header)

    if not rows:
        line = Text()
        line.append("  ")
        line.append("(none)".ljust(col_name), style=f"dim {PALETTE.text_muted}")
        line.append("no hooks configured", style=f"dim {PALETTE.error}")
        console.print(line)
        console.print()
        return

    for row in rows:
        style = PALETTE.text_bright if row.get("enabled", True) else f"dim {PALETTE.text_muted}"
        line = Text()
        line.append("  ")
        line.append(str(row["name"]).ljust(col_name), style=f"bold {style}")
        line.append(str(row["phase"]).ljust(col_phase), style=style)
        line.append((row.get("command") or "(root)").ljust(col_command), style=style)
        line.append(str(row.get("run", "")), style=f"dim {style}")
        console.print(line)

    console.print()


def render_command_tree(root, registry) -> None:
    """Render the command tree with the hooks registered on each command."""
    tree = Tree(Text(root.name, style=f"bold {PALETTE.accent}"))
    _add_branch(tree, root, registry)
    console.print(tree)


def _add_branch(branch: Tree, node, registry) -> None:
    for phase in HookPhase:
        for record in registry.records(phase, node):
            label = Text()
            label.append(f"{phase.value} ", style=f"dim {PALETTE.secondary}")
            label.append(record.name, style=PALETTE.text)
            if record.run_on_help:
                label.append(" [help]", style=f"dim {PALETTE.text_dim}")
            if record.persistent and phase is HookPhase.HELP:
                label.append(" [persistent]", style=f"dim {PALETTE.text_dim}")
            branch.add(label)

    for child in node.commands.values():
        sub = branch.add(Text(child.name, style=f"bold {PALETTE.text_bright}"))
        _add_branch(sub, child, registry)


def configure_logging(verbose: bool = False) -> None:
    """Route hookchain logs to stderr, at DEBUG when verbose."""
    logger = logging.getLogger("hookchain")
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
        ))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
