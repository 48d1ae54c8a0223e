"""Release pipeline: assemble and package a release around plugin checkpoints.

Order of a build, each step aborting the rest on failure:

    before_assembly -> assemble -> after_assembly
        -> before_package -> package -> after_package

The default steps write the release descriptor (plus profile overlays) into
``rel/<name>/releases/<version>/`` and zip that directory into
``rel/<name>/<name>-<version>.zip``.
"""

from __future__ import annotations

import json
import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING, Protocol
from zipfile import ZIP_DEFLATED, ZipFile

from relpack.core.result import Err, Ok, Result
from relpack.plugins import lifecycle
from relpack.platform.files import atomic_write_text
from relpack.release.model import Release

from .release_errors import (
    BuildFailure,
    EnvironmentNotFound,
    ReleaseNotFound,
    ResolveError,
    StepFailed,
)

if TYPE_CHECKING:
    from relpack.core.config import Config
    from relpack.core.project import Project
    from relpack.output.console import ConsoleProtocol
    from relpack.plugins.registry import PluginRegistry

__all__ = [
    "Assembler",
    "DirectoryAssembler",
    "Packager",
    "ReleaseBuilder",
    "ZipPackager",
    "resolve_release",
]


def resolve_release(
    config: Config,
    project: Project,
    *,
    name: str | None = None,
    environment: str | None = None,
) -> Result[Release, ResolveError]:
    """Select a configured release and compute its effective profile.

    Without ``name``, ``default_release`` is used, or the only release when
    exactly one is configured. Without ``environment``,
    ``default_environment`` is used (if any).
    """
    available = tuple(sorted(config.releases))
    selected = name or config.default_release
    if selected is None and len(available) == 1:
        selected = available[0]
    if selected is None or selected not in config.releases:
        return Err(ReleaseNotFound(name=selected, available=available))
    rel = config.releases[selected]

    env_name = environment or config.default_environment
    profile = rel.profile
    if env_name is not None:
        env_profile = config.environments.get(env_name)
        if env_profile is None:
            return Err(
                EnvironmentNotFound(name=env_name, available=tuple(sorted(config.environments)))
            )
        profile = profile.merge(env_profile)

    return Ok(
        Release(
            name=rel.name,
            version=rel.version,
            output_dir=project.release_dir(rel.name),
            applications=rel.applications,
            profile=profile,
            environment=env_name,
        )
    )


class Assembler(Protocol):
    def assemble(self, release: Release) -> Result[Release, StepFailed]:
        ...


class Packager(Protocol):
    def package(self, release: Release) -> Result[Release, StepFailed]:
        ...


def _descriptor(release: Release) -> dict[str, object]:
    return {
        "name": release.name,
        "version": release.version,
        "applications": list(release.applications),
        "environment": release.environment,
        "profile": release.profile.to_dict(),
    }


@dataclass(frozen=True, slots=True)
class DirectoryAssembler:
    """Writes the release tree under ``release.version_dir``.

    Overlays listed in the profile are resolved against ``root`` and copied
    into the version directory by name.
    """

    root: Path

    def assemble(self, release: Release) -> Result[Release, StepFailed]:
        target = release.version_dir
        try:
            target.mkdir(parents=True, exist_ok=True)
            for overlay in release.profile.overlays or ():
                src = self.root / overlay
                if not src.exists():
                    return Err(StepFailed("assemble", f"overlay not found: {overlay}", src))
                dest = target / src.name
                if src.is_dir():
                    shutil.copytree(src, dest, dirs_exist_ok=True)
                else:
                    shutil.copy2(src, dest)
            atomic_write_text(
                target / "release.json",
                json.dumps(_descriptor(release), indent=2, sort_keys=True) + "\n",
            )
        except OSError as e:
            return Err(StepFailed("assemble", str(e), target))
        return Ok(release)


@dataclass(frozen=True, slots=True)
class ZipPackager:
    """Zips the version directory into ``rel/<name>/<name>-<version>.zip``."""

    def package(self, release: Release) -> Result[Release, StepFailed]:
        source = release.version_dir
        if not source.is_dir():
            return Err(StepFailed("package", "release has not been assembled", source))

        archive = release.output_dir / release.archive_name
        prefix = f"{release.name}/releases/{release.version}"
        files = sorted(p for p in source.rglob("*") if p.is_file())
        try:
            # Some checkouts carry mtime=0 files, which ZIP cannot represent.
            with ZipFile(archive, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
                for path in files:
                    zf.write(path, arcname=f"{prefix}/{path.relative_to(source).as_posix()}")
        except OSError as e:
            return Err(StepFailed("package", str(e), archive))
        return Ok(replace(release, archive_path=archive))


class ReleaseBuilder:
    """Runs the release pipeline."""

    def __init__(
        self,
        *,
        registry: PluginRegistry,
        console: ConsoleProtocol,
        assembler: Assembler,
        packager: Packager,
    ) -> None:
        self._registry = registry
        self._console = console
        self._assembler = assembler
        self._packager = packager

    def build(self, release: Release) -> Result[Release, BuildFailure]:
        """Build ``release``.

        Returns:
            Ok(release) as left by the last plugin, or the first failure.
        """
        console = self._console
        registry = self._registry

        res = lifecycle.before_assembly(release, registry=registry, console=console)
        if isinstance(res, Err):
            return res

        console.info(f"Assembling release {res.value}..")
        assembled = self._assembler.assemble(res.value)
        if isinstance(assembled, Err):
            return assembled

        res = lifecycle.after_assembly(assembled.value, registry=registry, console=console)
        if isinstance(res, Err):
            return res

        res = lifecycle.before_package(res.value, registry=registry, console=console)
        if isinstance(res, Err):
            return res

        console.info(f"Packaging release {res.value}..")
        packaged = self._packager.package(res.value)
        if isinstance(packaged, Err):
            return packaged

        res = lifecycle.after_package(packaged.value, registry=registry, console=console)
        if isinstance(res, Err):
            return res

        built = res.value
        console.success("Release successfully built!")
        if built.archive_path is not None:
            console.notice(f"    Archive: {built.archive_path}")
        return Ok(built)
