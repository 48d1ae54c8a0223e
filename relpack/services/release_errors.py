from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relpack.plugins.dispatch import BadReturnValue, PluginCrashed


@dataclass(frozen=True, slots=True)
class ReleaseNotFound:
    name: str | None
    available: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class EnvironmentNotFound:
    name: str
    available: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class StepFailed:
    step: str
    message: str
    path: Path | None = None


ResolveError = ReleaseNotFound | EnvironmentNotFound

BuildFailure = PluginCrashed | BadReturnValue | StepFailed
