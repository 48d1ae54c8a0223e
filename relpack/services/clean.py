"""Clean service - remove release artifacts, then run after_cleanup plugins.

Two modes:
- last release (default): for every release configured in rel/config.toml
  whose directory exists, remove the assembled version and its archive.
- implode: remove the whole rel/ directory, configuration included.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from relpack.core.config import ConfigError, load_config
from relpack.core.result import Err, Ok, Result
from relpack.plugins import lifecycle
from relpack.platform.files import remove_tree

if TYPE_CHECKING:
    from relpack.core.project import Project
    from relpack.output.console import ConsoleProtocol
    from relpack.plugins.registry import PluginRegistry

__all__ = ["CleanError", "CleanFailed", "CleanOutcome", "clean_all", "clean_last", "run_clean"]


@dataclass(frozen=True, slots=True)
class CleanOutcome:
    """What a clean did.

    Attributes:
        removed: Paths that were deleted
        skipped: True when there was nothing to clean (no rel/ or no config)
    """

    removed: tuple[Path, ...] = ()
    skipped: bool = False


@dataclass(frozen=True, slots=True)
class CleanFailed:
    """A release artifact could not be removed."""

    path: Path
    message: str


CleanError = ConfigError | CleanFailed


def _remove(path: Path, console: ConsoleProtocol) -> Result[bool, CleanFailed]:
    try:
        return Ok(remove_tree(path))
    except OSError as e:
        console.error(f"Failed to remove {path}: {e}")
        return Err(CleanFailed(path, str(e)))


def clean_all(project: Project, console: ConsoleProtocol) -> Result[CleanOutcome, CleanError]:
    """Remove every release and the release configuration."""
    console.info("Cleaning all releases..")
    if not project.rel_dir.exists():
        console.warning("No rel directory found! Nothing to do.")
        return Ok(CleanOutcome(skipped=True))

    removed = _remove(project.rel_dir, console)
    if isinstance(removed, Err):
        return removed

    console.success("Clean successful!")
    return Ok(CleanOutcome(removed=(project.rel_dir,)))


def clean_last(project: Project, console: ConsoleProtocol) -> Result[CleanOutcome, CleanError]:
    """Remove the configured version of every release present under rel/."""
    console.info("Cleaning last release..")
    if not project.config_path.exists():
        console.warning("No config file found! Nothing to do.")
        return Ok(CleanOutcome(skipped=True))

    loaded = load_config(project.config_path)
    if isinstance(loaded, Err):
        console.error(f"Failed to load config:\n    {loaded.error.message}")
        return loaded

    removed: list[Path] = []
    for name, rel in sorted(loaded.value.releases.items()):
        release_dir = project.release_dir(name)
        if not release_dir.is_dir():
            continue
        console.notice(f"    Removing release {name}:{rel.version}")
        for path in (
            release_dir / "releases" / rel.version,
            release_dir / f"{name}-{rel.version}.zip",
        ):
            outcome = _remove(path, console)
            if isinstance(outcome, Err):
                return outcome
            if outcome.value:
                removed.append(path)

    console.success("Clean successful!")
    return Ok(CleanOutcome(removed=tuple(removed)))


def run_clean(
    args: Sequence[str],
    *,
    project: Project,
    registry: PluginRegistry,
    console: ConsoleProtocol,
    implode: bool = False,
    no_confirm: bool = False,
    confirm: Callable[[], bool] = lambda: False,
) -> Result[CleanOutcome, CleanError]:
    """Clean, then fire after_cleanup with ``args``.

    An implode that is not confirmed falls back to cleaning the last release.
    Plugins only run when something was actually cleaned.

    Raises:
        Exception: The original exception of a failing after_cleanup plugin.
    """
    if implode and (no_confirm or confirm()):
        result = clean_all(project, console)
    else:
        result = clean_last(project, console)

    if isinstance(result, Ok) and not result.value.skipped:
        lifecycle.after_cleanup(tuple(args), registry=registry, console=console)
    return result
