"""Application services: the release pipeline and the clean operation."""

from .clean import CleanError, CleanFailed, CleanOutcome, clean_all, clean_last, run_clean
from .release import (
    DirectoryAssembler,
    ReleaseBuilder,
    ZipPackager,
    resolve_release,
)
from .release_errors import (
    BuildFailure,
    EnvironmentNotFound,
    ReleaseNotFound,
    ResolveError,
    StepFailed,
)

__all__ = [
    # clean
    "CleanError",
    "CleanFailed",
    "CleanOutcome",
    "clean_all",
    "clean_last",
    "run_clean",
    # release
    "DirectoryAssembler",
    "ReleaseBuilder",
    "ZipPackager",
    "resolve_release",
    # errors
    "BuildFailure",
    "EnvironmentNotFound",
    "ReleaseNotFound",
    "ResolveError",
    "StepFailed",
]
