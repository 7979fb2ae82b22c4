"""End-to-end tests: hooks running through click invocations."""

import click
import pytest
from click.testing import CliRunner

from hookchain.command import Command
from hookchain.hooks import HookError, HookRegistry


def _emit(text):
    def hook(cmd, args):
        cmd.echo(text)
    hook.__qualname__ = f"emit_{text}"
    return hook


def _join(events, label):
    def hook(cmd, args):
        events.append(f"{label}:{' '.join(args)}")
    return hook


class TestAdapters:
    """Hooks installed into the command slots."""

    def test_hooks_on_single_command(self):
        events = []
        c = Command("c")
        registry = HookRegistry(c)
        registry.on_persistent_pre_run(c, _join(events, "persistent_pre_run"))
        registry.on_pre_run(c, _join(events, "pre_run"))
        registry.on_run(c, _join(events, "run"))
        registry.on_post_run(c, _join(events, "post_run"))
        registry.on_persistent_post_run(c, _join(events, "persistent_post_run"))

        c.execute(["one", "two"], standalone_mode=False)

        assert events == [
            "persistent_pre_run:one two",
            "pre_run:one two",
            "run:one two",
            "post_run:one two",
            "persistent_post_run:one two",
        ]

    def test_parent_and_child_hooks(self):
        events = []
        parent = Command("parent")
        child = Command("child")
        parent.add_command(child)
        registry = HookRegistry(parent)

        registry.on_persistent_pre_run(parent, _join(events, "parent_ppr"))
        registry.on_pre_run(parent, _join(events, "parent_pre"))
        registry.on_run(parent, _join(events, "parent_run"))
        registry.on_post_run(parent, _join(events, "parent_post"))
        registry.on_persistent_post_run(parent, _join(events, "parent_ppo"))

        registry.on_persistent_pre_run(child, _join(events, "child_ppr"))
        registry.on_pre_run(child, _join(events, "child_pre"))
        registry.on_pre_run(child, lambda cmd, args: events.append("child_pre2:" + " ".join(args) + " three"))
        registry.on_run(child, _join(events, "child_run"))
        registry.on_post_run(child, _join(events, "child_post"))
        registry.on_persistent_post_run(child, _join(events, "child_ppo"))

        parent.execute(["child", "one", "two"], standalone_mode=False)

        assert events == [
            "parent_ppr:one two",
            "child_ppr:one two",
            "child_pre:one two",
            "child_pre2:one two three",
            "child_run:one two",
            "child_post:one two",
            "parent_ppo:one two",
            "child_ppo:one two",
        ]

    def test_two_hooks_one_adapter_two_runs(self):
        events = []
        c = Command("c")
        registry = HookRegistry(c)
        registry.on_run(c, _join(events, "a"))
        adapter = c.run
        registry.on_run(c, _join(events, "b"))
        assert c.run is adapter

        c.execute([], standalone_mode=False)
        c.execute(["x"], standalone_mode=False)
        assert events == ["a:", "b:", "a:x", "b:x"]

    def test_hooks_added_after_install_still_run(self):
        events = []
        c = Command("c")
        registry = HookRegistry(c)
        registry.on_run(c, _join(events, "first"))
        c.execute([], standalone_mode=False)
        registry.on_run(c, _join(events, "second"))
        c.execute([], standalone_mode=False)
        assert events == ["first:", "first:", "second:"]

    def test_framework_callback_runs_after_hooks(self):
        events = []
        c = Command("c", pre_run=_join(events, "own_pre"), run=_join(events, "own_run"))
        registry = HookRegistry(c)
        registry.on_pre_run(c, _join(events, "hook_pre"))
        c.execute([], standalone_mode=False)
        assert events == ["hook_pre:", "own_pre:", "own_run:"]

    def test_persistent_chain_four_hooks(self):
        events = []
        root = Command("root")
        a = Command("a")
        b = Command("b", run=lambda cmd, args: events.append("run"))
        root.add_command(a)
        a.add_command(b)
        registry = HookRegistry(root)
        registry.on_persistent_pre_run(root, _join(events, "r1"))
        registry.on_persistent_pre_run(a, _join(events, "r2"))
        registry.on_persistent_pre_run(a, _join(events, "r3"))
        registry.on_persistent_pre_run(b, _join(events, "r4"))

        root.execute(["a", "b"], standalone_mode=False)
        assert events == ["r1:", "r2:", "r3:", "r4:", "run"]

    def test_persistent_post_run_root_to_leaf(self):
        events = []
        root = Command("root")
        a = Command("a")
        b = Command("b", run=lambda cmd, args: events.append("run"))
        root.add_command(a)
        a.add_command(b)
        registry = HookRegistry(root)
        registry.on_post_run(b, _join(events, "b1"), persistent=True)
        registry.on_persistent_post_run(root, _join(events, "root1"))
        registry.on_persistent_post_run(a, _join(events, "a1"))
        registry.on_persistent_post_run(root, _join(events, "root2"))

        root.execute(["a", "b"], standalone_mode=False)
        assert events == ["run", "root1:", "root2:", "a1:", "b1:"]

    def test_node_local_hooks_only_for_invoked_command(self):
        events = []
        root = Command("root", run=lambda cmd, args: events.append("root_run"))
        child = Command("child", run=lambda cmd, args: events.append("child_run"))
        root.add_command(child)
        registry = HookRegistry(root)
        registry.on_pre_run(root, _join(events, "root_pre"))
        registry.on_post_run(root, _join(events, "root_post"))

        root.execute(["child"], standalone_mode=False)
        assert events == ["child_run"]

        root.execute([], standalone_mode=False)
        assert events == ["child_run", "root_pre:", "root_run", "root_post:"]

    def test_runnable_group_receives_args(self):
        events = []
        root = Command("root")
        a = Command("a", run=_join(events, "run_a"))
        a.add_command(Command("b", run=_join(events, "run_b")))
        root.add_command(a)
        registry = HookRegistry(root)
        registry.on_pre_run(a, _join(events, "pre_a"))

        root.execute(["a", "x", "y"], standalone_mode=False)
        assert events == ["pre_a:x y", "run_a:x y"]

        events.clear()
        root.execute(["a", "b", "z"], standalone_mode=False)
        assert events == ["run_b:z"]


class TestFailures:
    """The first failing hook aborts the chain."""

    def test_failure_halts_chain_and_skips_run(self):
        events = []
        root = Command("root")
        child = Command("child", run=lambda cmd, args: events.append("run"))
        root.add_command(child)
        registry = HookRegistry(root)

        def fail(cmd, args):
            events.append("fail")
            raise RuntimeError("database unavailable")

        registry.on_persistent_pre_run(root, _join(events, "first"))
        registry.on_persistent_pre_run(root, fail)
        registry.on_persistent_pre_run(child, _join(events, "never"))
        registry.on_pre_run(child, _join(events, "never_pre"))

        with pytest.raises(HookError, match="database unavailable"):
            root.execute(["child"], standalone_mode=False)
        assert events == ["first:", "fail"]

    def test_failure_skips_framework_callback(self):
        events = []

        def fail(cmd, args):
            raise click.ClickException("denied")

        c = Command("c", run=lambda cmd, args: events.append("own_run"))
        registry = HookRegistry(c)
        registry.on_run(c, fail)
        result = CliRunner().invoke(c.build(), [])
        assert result.exit_code == 1
        assert "denied" in result.output
        assert events == []

    def test_failure_reported_by_click(self):
        c = Command("c", run=lambda cmd, args: None)
        registry = HookRegistry(c)

        @registry.on_pre_run(c)
        def check(cmd, args):
            raise ValueError("missing token")

        result = CliRunner().invoke(c.build(), [])
        assert result.exit_code == 1
        assert "Error:" in result.output
        assert "missing token" in result.output

    def test_post_run_failure_keeps_run_side_effects(self):
        events = []
        c = Command("c", run=lambda cmd, args: events.append("run"))
        registry = HookRegistry(c)
        registry.on_post_run(c, lambda cmd, args: 1 / 0)
        registry.on_persistent_post_run(c, _join(events, "never"))
        with pytest.raises(HookError):
            c.execute([], standalone_mode=False)
        assert events == ["run"]


class TestEndToEnd:
    """Output ordering through the command's output channel."""

    def test_persistent_then_pre_run_before_run(self):
        root = Command("root")
        child = Command("child", run=lambda cmd, args: cmd.echo("run " + " ".join(args)))
        root.add_command(child)
        registry = HookRegistry(root)
        registry.on_persistent_pre_run(root, _emit("R"))
        registry.on_persistent_pre_run(child, _emit("C"))
        registry.on_pre_run(child, _emit("P"))

        result = CliRunner().invoke(root.build(), ["child", "a", "b"])
        assert result.exit_code == 0, result.output
        assert result.output == "R\nC\nP\nrun a b\n"


class TestHelpPathway:
    """Hooks triggered by help requests."""

    def _tree(self, events):
        root = Command("root", help="Root.")
        a = Command("a", help="Middle.")
        b = Command("b", help="Leaf.", run=lambda cmd, args: events.append("run"))
        root.add_command(a)
        a.add_command(b)
        root.set_help_func(lambda cmd, args: events.append(f"render:{cmd.name}"))
        return root, a, b

    def _register_all(self, registry, root, a, b, events):
        registry.on_persistent_pre_run(root, _join(events, "ppr_root"), run_on_help=True)
        registry.on_persistent_pre_run(root, _join(events, "ppr_root_quiet"))
        registry.on_persistent_pre_run(a, _join(events, "ppr_a"), run_on_help=True)
        registry.on_pre_run(b, _join(events, "pre_b"), run_on_help=True)
        registry.on_pre_run(b, _join(events, "pre_b_quiet"))
        registry.on_pre_run(a, _join(events, "pre_a"), run_on_help=True)
        registry.on_help(b, _join(events, "help_b"))
        registry.on_help(a, _join(events, "help_a_plain"))
        registry.on_help(a, _join(events, "help_a"), persistent=True)
        registry.on_help(root, _join(events, "help_root"), persistent=True)

    def test_depth_two_help_order(self):
        events = []
        root, a, b = self._tree(events)
        registry = HookRegistry(root)
        self._register_all(registry, root, a, b, events)

        result = CliRunner().invoke(root.build(), ["a", "b", "--help"])
        assert result.exit_code == 0, result.output
        assert events == [
            "ppr_root:",
            "ppr_a:",
            "pre_b:",
            "help_b:",
            "help_a:",
            "help_root:",
            "render:b",
        ]

    def test_help_subcommand_uses_pathway(self):
        events = []
        root, a, b = self._tree(events)
        registry = HookRegistry(root)
        self._register_all(registry, root, a, b, events)

        result = CliRunner().invoke(root.build(), ["help", "a"])
        assert result.exit_code == 0, result.output
        assert events == [
            "ppr_root:",
            "ppr_a:",
            "pre_a:",
            "help_a_plain:",
            "help_a:",
            "help_root:",
            "render:a",
        ]

    def test_non_runnable_command_uses_pathway(self):
        events = []
        root, a, b = self._tree(events)
        registry = HookRegistry(root)
        registry.on_help(a, _join(events, "help_a"))
        root.execute(["a"], standalone_mode=False)
        assert events == ["help_a:", "render:a"]

    def test_help_failure_suppresses_help_text(self):
        root = Command("root", help="Root command.")
        child = Command("child", help="Child command.", run=lambda cmd, args: None)
        root.add_command(child)
        registry = HookRegistry(root)
        emitted = []

        registry.on_help(child, _emit("before"))

        @registry.on_help(child)
        def refuse(cmd, args):
            raise click.ClickException("help disabled")

        registry.on_help(child, lambda cmd, args: emitted.append("after"))

        result = CliRunner().invoke(root.build(), ["child", "--help"])
        assert result.exit_code == 1
        assert "Usage:" not in result.output
        assert "Child command." not in result.output
        assert "help disabled" in result.output
        assert emitted == []

    def test_failing_run_on_help_persistent_pre_run_suppresses_help(self):
        events = []
        root, a, b = self._tree(events)
        registry = HookRegistry(root)

        @registry.on_persistent_pre_run(root, run_on_help=True)
        def deny(cmd, args):
            raise click.ClickException("not allowed")

        registry.on_help(b, _join(events, "help_b"))

        result = CliRunner().invoke(root.build(), ["a", "b", "--help"])
        assert result.exit_code == 1
        assert "not allowed" in result.output
        assert "Leaf." not in result.output
        assert events == []

    def test_failing_run_on_help_pre_run_suppresses_help(self):
        events = []
        root, a, b = self._tree(events)
        registry = HookRegistry(root)
        registry.on_persistent_pre_run(root, _join(events, "ppr_root"), run_on_help=True)

        @registry.on_pre_run(b, run_on_help=True)
        def deny(cmd, args):
            raise RuntimeError("locked")

        registry.on_help(b, _join(events, "help_b"))

        result = CliRunner().invoke(root.build(), ["a", "b", "--help"])
        assert result.exit_code == 1
        assert "locked" in result.output
        assert events == ["ppr_root:"]

    def test_hook_output_precedes_help_text(self):
        root = Command("root")
        child = Command("child", help="Child command.", run=lambda cmd, args: None)
        root.add_command(child)
        registry = HookRegistry(root)
        registry.on_help(child, _emit("NOTICE"))

        result = CliRunner().invoke(root.build(), ["child", "--help"])
        assert result.exit_code == 0
        assert result.output.startswith("NOTICE\n")
        assert "Child command." in result.output

    def test_help_does_not_run_command(self):
        events = []
        root, a, b = self._tree(events)
        registry = HookRegistry(root)
        registry.on_run(b, _join(events, "run_hook"))
        registry.on_post_run(b, _join(events, "post_hook"))
        CliRunner().invoke(root.build(), ["a", "b", "--help"])
        assert events == ["render:b"]

    def test_lazily_attached_pathway(self):
        events = []
        root, a, b = self._tree(events)
        registry = HookRegistry()
        registry.on_pre_run(b, _join(events, "pre_b"), run_on_help=True)
        b.show_help()
        assert events == ["pre_b:", "render:b"]
