"""Tests for relpack.plugins.dispatch module."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import pytest

from relpack.core.result import Err, Ok
from relpack.output.console import MockConsole
from relpack.plugins.contract import Extension, Phase, Plugin
from relpack.plugins.dispatch import (
    BadReturnValue,
    Failed,
    PluginCrashed,
    Unchanged,
    Updated,
    fire,
    invoke,
    thread_state,
)
from relpack.release.model import Release, is_release

Hook = Callable[[object], object]


def make_extension(name: str, **hooks: Hook) -> Extension:
    """Build an extension whose class overrides exactly the given hooks."""

    def method(fn: Hook) -> Callable[[Plugin, object], object]:
        return lambda self, value: fn(value)

    cls = type(f"Plugin_{name}", (Plugin,), {hook: method(fn) for hook, fn in hooks.items()})
    return Extension(name=name, plugin=cls())


@pytest.fixture
def release(tmp_path: Path) -> Release:
    return Release(name="app", version="1.0.0", output_dir=tmp_path / "rel" / "app")


class TestInvoke:
    def test_unimplemented_hook_is_unchanged(self, release: Release) -> None:
        ext = make_extension("a", after_package=lambda r: pytest.fail("wrong hook"))

        assert invoke(ext, Phase.BEFORE_ASSEMBLY, release, is_release) == Unchanged()

    def test_none_is_unchanged(self, release: Release) -> None:
        ext = make_extension("a", before_assembly=lambda r: None)

        assert invoke(ext, Phase.BEFORE_ASSEMBLY, release, is_release) == Unchanged()

    def test_valid_value_is_updated(self, release: Release) -> None:
        bumped = replace(release, version="1.0.1")
        ext = make_extension("a", before_assembly=lambda r: bumped)

        assert invoke(ext, Phase.BEFORE_ASSEMBLY, release, is_release) == Updated(bumped)

    def test_invalid_value_fails(self, release: Release) -> None:
        ext = make_extension("a", before_assembly=lambda r: {"version": "2"})

        outcome = invoke(ext, Phase.BEFORE_ASSEMBLY, release, is_release)

        assert outcome == Failed(
            BadReturnValue(plugin="a", phase=Phase.BEFORE_ASSEMBLY, value={"version": "2"})
        )

    def test_exception_fails(self, release: Release) -> None:
        error = RuntimeError("boom")

        def crash(_: object) -> object:
            raise error

        ext = make_extension("a", before_assembly=crash)

        outcome = invoke(ext, Phase.BEFORE_ASSEMBLY, release, is_release)

        assert outcome == Failed(
            PluginCrashed(plugin="a", phase=Phase.BEFORE_ASSEMBLY, error=error)
        )


class TestThreadState:
    def test_empty_list_returns_input(self, release: Release) -> None:
        assert thread_state([], Phase.AFTER_ASSEMBLY, release, is_release) == Ok(release)

    def test_all_unchanged_returns_input(self, release: Release) -> None:
        exts = [make_extension(n, after_assembly=lambda r: None) for n in ("a", "b", "c")]

        result = thread_state(exts, Phase.AFTER_ASSEMBLY, release, is_release)

        assert result == Ok(release)
        assert isinstance(result, Ok)
        assert result.value is release

    def test_state_threads_through_unchanged(self, release: Release) -> None:
        s1 = replace(release, version="1.1.0")
        s2 = replace(release, version="1.2.0")
        seen: dict[str, object] = {}

        def c_hook(state: object) -> object:
            seen["c"] = state
            return s2

        def b_hook(state: object) -> object:
            seen["b"] = state
            return None

        exts = [
            make_extension("a", before_package=lambda r: s1),
            make_extension("b", before_package=b_hook),
            make_extension("c", before_package=c_hook),
        ]

        result = thread_state(exts, Phase.BEFORE_PACKAGE, release, is_release)

        assert seen["b"] is s1
        assert seen["c"] is s1
        assert result == Ok(s2)

    def test_crash_stops_chain_and_names_plugin(self, release: Release) -> None:
        calls: list[str] = []

        def record(name: str, returned: object = None) -> Hook:
            def hook(_: object) -> object:
                calls.append(name)
                return returned

            return hook

        def crash(_: object) -> object:
            calls.append("b")
            raise KeyError("missing")

        exts = [
            make_extension("a", after_package=record("a")),
            make_extension("b", after_package=crash),
            make_extension("c", after_package=record("c")),
        ]

        result = thread_state(exts, Phase.AFTER_PACKAGE, release, is_release)

        assert calls == ["a", "b"]
        assert isinstance(result, Err)
        assert isinstance(result.error, PluginCrashed)
        assert result.error.plugin == "b"
        assert isinstance(result.error.error, KeyError)

    def test_bad_return_stops_chain(self, release: Release) -> None:
        c_calls: list[object] = []
        exts = [
            make_extension("a", before_assembly=lambda r: None),
            make_extension("b", before_assembly=lambda r: "not a release"),
            make_extension("c", before_assembly=c_calls.append),
        ]

        result = thread_state(exts, Phase.BEFORE_ASSEMBLY, release, is_release)

        assert result == Err(
            BadReturnValue(plugin="b", phase=Phase.BEFORE_ASSEMBLY, value="not a release")
        )
        assert c_calls == []

    def test_rejects_fire_phase(self, release: Release) -> None:
        with pytest.raises(ValueError, match="does not thread state"):
            thread_state([], Phase.AFTER_CLEANUP, release, is_release)


class TestFire:
    def test_empty_list_is_noop(self) -> None:
        console = MockConsole()

        fire([], Phase.AFTER_CLEANUP, ("--implode",), console=console)

        assert console.outputs == []

    def test_every_plugin_sees_same_args(self) -> None:
        seen: list[object] = []
        args = ("--implode", "--no-confirm")
        exts = [
            make_extension("a", after_cleanup=lambda a: seen.append(a) or "ignored"),
            make_extension("b", after_cleanup=seen.append),
        ]

        fire(exts, Phase.AFTER_CLEANUP, args)

        assert seen == [args, args]
        assert all(a is args for a in seen)

    def test_crash_reraises_original_and_stops(self) -> None:
        console = MockConsole()
        error = OSError("disk gone")
        b_calls: list[object] = []

        def crash(_: object) -> object:
            raise error

        exts = [
            make_extension("a", after_cleanup=crash),
            make_extension("b", after_cleanup=b_calls.append),
        ]

        with pytest.raises(OSError) as exc_info:
            fire(exts, Phase.AFTER_CLEANUP, (), console=console)

        assert exc_info.value is error
        assert "raised by plugin a during after_cleanup" in exc_info.value.__notes__
        assert b_calls == []
        assert console.find("Failed to execute after_cleanup hook for a!")

    def test_rejects_state_phase(self) -> None:
        with pytest.raises(ValueError, match="threads state"):
            fire([], Phase.BEFORE_ASSEMBLY, ())
