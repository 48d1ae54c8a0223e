"""Lifecycle dispatcher - runs one hook across an ordered list of plugins.

Two modes, both strictly sequential and both stopping at the first failure:

- ``thread_state``: each plugin receives the state returned by the previous
  one. ``None`` leaves the state unchanged; any other value must satisfy the
  phase's predicate. Failures come back as ``Err(PluginFailure)``.
- ``fire``: every plugin receives the same arguments and return values are
  ignored. The first exception is logged and re-raised to the caller with a
  note naming the plugin.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from relpack.core.result import Err, Ok, Result

from .contract import DispatchMode, Extension, Phase

if TYPE_CHECKING:
    from relpack.output.console import ConsoleProtocol

__all__ = [
    "BadReturnValue",
    "Failed",
    "HookOutcome",
    "PluginCrashed",
    "PluginFailure",
    "Unchanged",
    "Updated",
    "fire",
    "invoke",
    "thread_state",
]

type Predicate = Callable[[object], bool]


@dataclass(frozen=True, slots=True)
class PluginCrashed:
    """A hook raised an exception."""

    plugin: str
    phase: Phase
    error: Exception


@dataclass(frozen=True, slots=True)
class BadReturnValue:
    """A hook returned a value rejected by the phase's predicate."""

    plugin: str
    phase: Phase
    value: object


PluginFailure = PluginCrashed | BadReturnValue


@dataclass(frozen=True, slots=True)
class Unchanged:
    """The plugin left the state as it was."""


@dataclass(frozen=True, slots=True)
class Updated[S]:
    """The plugin returned a valid replacement state."""

    state: S


@dataclass(frozen=True, slots=True)
class Failed:
    failure: PluginFailure


type HookOutcome[S] = Unchanged | Updated[S] | Failed


def invoke[S](
    extension: Extension,
    phase: Phase,
    state: S,
    predicate: Predicate,
) -> HookOutcome[S]:
    """Call one plugin's hook for ``phase`` and classify what it returned.

    Hooks the plugin does not override are not called.
    """
    if not extension.implements(phase):
        return Unchanged()

    hook = getattr(extension.plugin, phase.value)
    try:
        returned = hook(state)
    except Exception as e:
        return Failed(PluginCrashed(plugin=extension.name, phase=phase, error=e))

    if returned is None:
        return Unchanged()
    if not predicate(returned):
        return Failed(BadReturnValue(plugin=extension.name, phase=phase, value=returned))
    return Updated(returned)


def thread_state[S](
    extensions: Sequence[Extension],
    phase: Phase,
    state: S,
    predicate: Predicate,
) -> Result[S, PluginFailure]:
    """Fold ``state`` through every plugin's hook, in order.

    Args:
        extensions: Plugins in dispatch order
        phase: A state-threading phase
        state: Initial state
        predicate: Validity check for values returned by hooks

    Returns:
        Ok(final state), or Err(PluginFailure) for the first failing plugin.
        Plugins after a failing one are never invoked.

    Raises:
        ValueError: If ``phase`` is not a state-threading phase.
    """
    if phase.mode is not DispatchMode.STATE:
        raise ValueError(f"{phase} does not thread state")

    current = state
    for extension in extensions:
        match invoke(extension, phase, current, predicate):
            case Failed(failure=failure):
                return Err(failure)
            case Updated(state=new_state):
                current = new_state
            case Unchanged():
                pass
    return Ok(current)


def fire(
    extensions: Sequence[Extension],
    phase: Phase,
    args: tuple[str, ...],
    *,
    console: ConsoleProtocol | None = None,
) -> None:
    """Invoke every plugin's hook with the same ``args``.

    Raises:
        ValueError: If ``phase`` threads state.
        Exception: The original exception of the first failing hook, with a
            note naming the plugin. Later plugins are not invoked.
    """
    if phase.mode is not DispatchMode.FIRE:
        raise ValueError(f"{phase} threads state, use thread_state")

    for extension in extensions:
        if not extension.implements(phase):
            continue
        hook = getattr(extension.plugin, phase.value)
        try:
            hook(args)
        except Exception as e:
            if console is not None:
                console.error(f"Failed to execute {phase} hook for {extension.name}!")
            e.add_note(f"raised by plugin {extension.name} during {phase}")
            raise
