"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from relpack.core.errors import ErrorCode
from relpack.output.console import Style
from relpack.plugins.dispatch import BadReturnValue, PluginCrashed
from relpack.services.release_errors import (
    BuildFailure,
    EnvironmentNotFound,
    ReleaseNotFound,
    ResolveError,
    StepFailed,
)

if TYPE_CHECKING:
    from relpack.output.console import ConsoleProtocol

__all__ = [
    "build_failure_exit_code",
    "print_build_failure",
    "print_resolve_error",
    "resolve_error_exit_code",
]


def print_build_failure(error: BuildFailure, console: ConsoleProtocol) -> None:
    """Print a failed build to the console."""
    match error:
        case PluginCrashed(plugin=plugin, phase=phase, error=exc):
            console.error(f"Release failed: plugin {plugin} crashed during {phase}")
            console.print(f"{type(exc).__name__}: {exc}", Style.DIM)
        case BadReturnValue(plugin=plugin, phase=phase, value=value):
            console.error(f"Release failed: plugin {plugin} returned a bad value from {phase}")
            console.print(f"got: {value!r}", Style.DIM)
        case StepFailed(step=step, message=message, path=path):
            console.error(f"Release failed: {step} step: {message}")
            if path is not None:
                console.print(f"path: {path}", Style.DIM)


def build_failure_exit_code(error: BuildFailure) -> int:
    match error:
        case PluginCrashed() | BadReturnValue():
            return int(ErrorCode.PLUGIN_ERROR)
        case StepFailed():
            return int(ErrorCode.BUILD_ERROR)


def print_resolve_error(error: ResolveError, console: ConsoleProtocol) -> None:
    match error:
        case ReleaseNotFound(name=None, available=available):
            console.error("No release selected and no default_release configured")
            if available:
                console.print(f"Available: {', '.join(available)}", Style.DIM)
        case ReleaseNotFound(name=name, available=available):
            console.error(f"Unknown release: {name}")
            if available:
                console.print(f"Available: {', '.join(available)}", Style.DIM)
        case EnvironmentNotFound(name=name, available=available):
            console.error(f"Unknown environment: {name}")
            if available:
                console.print(f"Available: {', '.join(available)}", Style.DIM)


def resolve_error_exit_code(error: ResolveError) -> int:
    match error:
        case ReleaseNotFound() | EnvironmentNotFound():
            return int(ErrorCode.USER_ERROR)
