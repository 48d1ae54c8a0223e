"""Lifecycle checkpoints called by the release pipeline and by cleanup.

Each checkpoint discovers the plugins once, then dispatches the matching
hook across them. The release phases return ``Result[Release, PluginFailure]``
and leave it to the caller to abort; ``after_cleanup`` re-raises the first
plugin exception.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relpack.core.result import Err, Result
from relpack.release.model import Release, is_release

from .contract import CleanupArgs, Phase
from .dispatch import BadReturnValue, PluginCrashed, PluginFailure, fire, thread_state

if TYPE_CHECKING:
    from relpack.output.console import ConsoleProtocol

    from .registry import PluginRegistry

__all__ = [
    "after_assembly",
    "after_cleanup",
    "after_package",
    "before_assembly",
    "before_package",
    "run_release_phase",
]


def run_release_phase(
    phase: Phase,
    release: Release,
    *,
    registry: PluginRegistry,
    console: ConsoleProtocol,
) -> Result[Release, PluginFailure]:
    """Run a release-threading phase across all discovered plugins."""
    extensions = registry.discover()
    console.debug(f"Running {phase} plugins ({len(extensions)} found)")

    result = thread_state(extensions, phase, release, is_release)
    if isinstance(result, Err):
        match result.error:
            case PluginCrashed(plugin=plugin, error=error):
                console.error(f"Plugin {plugin} failed during {phase}: {error}")
            case BadReturnValue(plugin=plugin, value=value):
                console.error(
                    f"Plugin {plugin} returned an invalid value from {phase}: "
                    f"expected a Release, got {type(value).__name__}"
                )
    return result


def before_assembly(
    release: Release, *, registry: PluginRegistry, console: ConsoleProtocol
) -> Result[Release, PluginFailure]:
    """Runs before_assembly with all plugins."""
    return run_release_phase(Phase.BEFORE_ASSEMBLY, release, registry=registry, console=console)


def after_assembly(
    release: Release, *, registry: PluginRegistry, console: ConsoleProtocol
) -> Result[Release, PluginFailure]:
    """Runs after_assembly with all plugins."""
    return run_release_phase(Phase.AFTER_ASSEMBLY, release, registry=registry, console=console)


def before_package(
    release: Release, *, registry: PluginRegistry, console: ConsoleProtocol
) -> Result[Release, PluginFailure]:
    """Runs before_package with all plugins."""
    return run_release_phase(Phase.BEFORE_PACKAGE, release, registry=registry, console=console)


def after_package(
    release: Release, *, registry: PluginRegistry, console: ConsoleProtocol
) -> Result[Release, PluginFailure]:
    """Runs after_package with all plugins."""
    return run_release_phase(Phase.AFTER_PACKAGE, release, registry=registry, console=console)


def after_cleanup(
    args: CleanupArgs, *, registry: PluginRegistry, console: ConsoleProtocol
) -> None:
    """Runs after_cleanup with all plugins.

    Raises:
        Exception: The first plugin exception, unchanged apart from a note.
    """
    extensions = registry.discover()
    console.debug(f"Running {Phase.AFTER_CLEANUP} plugins ({len(extensions)} found)")
    fire(extensions, Phase.AFTER_CLEANUP, tuple(args), console=console)
