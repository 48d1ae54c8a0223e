"""Tests for the release pipeline."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from zipfile import ZipFile

import pytest

from relpack.core.config import Config, ReleaseConfig
from relpack.core.project import Project
from relpack.core.result import Err, Ok, Result
from relpack.output.console import MockConsole
from relpack.plugins.contract import Plugin
from relpack.plugins.dispatch import BadReturnValue, PluginCrashed
from relpack.plugins.registry import PluginRegistry
from relpack.release.model import Profile, Release
from relpack.services.release import (
    DirectoryAssembler,
    ReleaseBuilder,
    ZipPackager,
    resolve_release,
)
from relpack.services.release_errors import EnvironmentNotFound, ReleaseNotFound, StepFailed


def _registry(*plugins: Plugin) -> PluginRegistry:
    registry = PluginRegistry(use_entry_points=False)
    for plugin in plugins:
        registry.register(plugin)
    return registry


def _calls() -> list[str]:
    return []


@dataclass
class RecordingStep:
    calls: list[str] = field(default_factory=_calls)

    def assemble(self, release: Release) -> Result[Release, StepFailed]:
        self.calls.append("assemble")
        return Ok(release)

    def package(self, release: Release) -> Result[Release, StepFailed]:
        self.calls.append("package")
        return Ok(release)


class Stamp(Plugin):
    name = "stamp"

    def before_assembly(self, release: Release) -> Release | None:
        return replace(release, version=f"{release.version}+build.7")


class Tracker(Plugin):
    name = "tracker"

    def __init__(self) -> None:
        self.archives: list[Path | None] = []

    def after_package(self, release: Release) -> Release | None:
        self.archives.append(release.archive_path)
        return None


@pytest.fixture
def project(tmp_path: Path) -> Project:
    (tmp_path / "rel").mkdir()
    return Project(root=tmp_path)


@pytest.fixture
def release(project: Project) -> Release:
    return Release(
        name="app",
        version="1.0.0",
        output_dir=project.release_dir("app"),
        applications=("app",),
        profile=Profile(include_src=False),
    )


class TestResolveRelease:
    def _config(self) -> Config:
        return Config(
            releases={
                "app": ReleaseConfig(
                    name="app",
                    version="1.0.0",
                    applications=("app", "web"),
                    profile=Profile(include_src=True, include_runtime=False),
                ),
                "worker": ReleaseConfig(name="worker", version="0.2.0"),
            },
            environments={"prod": Profile(include_runtime=True)},
        )

    def test_named_release_with_environment(self, project: Project) -> None:
        result = resolve_release(self._config(), project, name="app", environment="prod")

        assert isinstance(result, Ok)
        release = result.value
        assert release.applications == ("app", "web")
        assert release.environment == "prod"
        assert release.output_dir == project.rel_dir / "app"
        assert release.profile == Profile(include_src=True, include_runtime=True)

    def test_default_release(self, project: Project) -> None:
        config = replace(self._config(), default_release="worker")

        result = resolve_release(config, project)

        assert isinstance(result, Ok)
        assert result.value.name == "worker"
        assert result.value.environment is None

    def test_single_release_is_implicit(self, project: Project) -> None:
        config = Config(releases={"solo": ReleaseConfig(name="solo", version="1")})

        result = resolve_release(config, project)

        assert isinstance(result, Ok)
        assert result.value.name == "solo"

    def test_ambiguous_release(self, project: Project) -> None:
        result = resolve_release(self._config(), project)

        assert result == Err(ReleaseNotFound(name=None, available=("app", "worker")))

    def test_unknown_release(self, project: Project) -> None:
        result = resolve_release(self._config(), project, name="nope")

        assert result == Err(ReleaseNotFound(name="nope", available=("app", "worker")))

    def test_unknown_environment(self, project: Project) -> None:
        result = resolve_release(self._config(), project, name="app", environment="staging")

        assert result == Err(EnvironmentNotFound(name="staging", available=("prod",)))


class TestDefaultSteps:
    def test_assemble_writes_descriptor_and_overlays(
        self, project: Project, release: Release
    ) -> None:
        overlay = project.root / "rel" / "overlays" / "README.md"
        overlay.parent.mkdir(parents=True)
        overlay.write_text("hello", encoding="utf-8")
        release = replace(release, profile=Profile(overlays=("rel/overlays/README.md",)))

        result = DirectoryAssembler(root=project.root).assemble(release)

        assert result == Ok(release)
        descriptor = json.loads((release.version_dir / "release.json").read_text("utf-8"))
        assert descriptor["name"] == "app"
        assert descriptor["version"] == "1.0.0"
        assert descriptor["profile"] == {"overlays": ["rel/overlays/README.md"]}
        assert (release.version_dir / "README.md").read_text("utf-8") == "hello"

    def test_assemble_missing_overlay(self, project: Project, release: Release) -> None:
        release = replace(release, profile=Profile(overlays=("missing.txt",)))

        result = DirectoryAssembler(root=project.root).assemble(release)

        assert isinstance(result, Err)
        assert result.error.step == "assemble"
        assert "overlay not found" in result.error.message

    def test_package_requires_assembly(self, release: Release) -> None:
        result = ZipPackager().package(release)

        assert isinstance(result, Err)
        assert result.error.message == "release has not been assembled"

    def test_package_zips_version_dir(self, project: Project, release: Release) -> None:
        DirectoryAssembler(root=project.root).assemble(release)

        result = ZipPackager().package(release)

        assert isinstance(result, Ok)
        archive = release.output_dir / "app-1.0.0.zip"
        assert result.value.archive_path == archive
        with ZipFile(archive) as zf:
            assert zf.namelist() == ["app/releases/1.0.0/release.json"]


class TestReleaseBuilder:
    def test_full_build(self, project: Project, release: Release) -> None:
        tracker = Tracker()
        console = MockConsole()
        builder = ReleaseBuilder(
            registry=_registry(Stamp(), tracker),
            console=console,
            assembler=DirectoryAssembler(root=project.root),
            packager=ZipPackager(),
        )

        result = builder.build(release)

        assert isinstance(result, Ok)
        built = result.value
        assert built.version == "1.0.0+build.7"
        expected_archive = release.output_dir / "app-1.0.0+build.7.zip"
        assert built.archive_path == expected_archive
        assert expected_archive.is_file()
        assert tracker.archives == [expected_archive]
        assert console.has_success()

    def test_steps_run_in_order(self, release: Release) -> None:
        order: list[str] = []
        steps = RecordingStep(calls=order)

        class Trace(Plugin):
            name = "trace"

            def before_assembly(self, r: Release) -> Release | None:
                order.append("before_assembly")
                return None

            def after_assembly(self, r: Release) -> Release | None:
                order.append("after_assembly")
                return None

            def before_package(self, r: Release) -> Release | None:
                order.append("before_package")
                return None

            def after_package(self, r: Release) -> Release | None:
                order.append("after_package")
                return None

        builder = ReleaseBuilder(
            registry=_registry(Trace()),
            console=MockConsole(),
            assembler=steps,
            packager=steps,
        )

        assert builder.build(release) == Ok(release)
        assert order == [
            "before_assembly",
            "assemble",
            "after_assembly",
            "before_package",
            "package",
            "after_package",
        ]

    def test_plugin_crash_aborts_before_assembly(self, release: Release) -> None:
        steps = RecordingStep()

        class Veto(Plugin):
            name = "veto"

            def before_assembly(self, r: Release) -> Release | None:
                raise ValueError("not today")

        builder = ReleaseBuilder(
            registry=_registry(Veto()),
            console=MockConsole(),
            assembler=steps,
            packager=steps,
        )

        result = builder.build(release)

        assert isinstance(result, Err)
        assert isinstance(result.error, PluginCrashed)
        assert result.error.plugin == "veto"
        assert steps.calls == []

    def test_bad_return_aborts_before_packaging(self, release: Release) -> None:
        steps = RecordingStep()

        class Sloppy(Plugin):
            name = "sloppy"

            def after_assembly(self, r: Release) -> Release | None:
                return {"name": r.name}  # type: ignore[return-value]

        builder = ReleaseBuilder(
            registry=_registry(Sloppy()),
            console=MockConsole(),
            assembler=steps,
            packager=steps,
        )

        result = builder.build(release)

        assert isinstance(result, Err)
        assert isinstance(result.error, BadReturnValue)
        assert steps.calls == ["assemble"]

    def test_step_failure_aborts(self, release: Release) -> None:
        tracker = Tracker()

        class FailingPackager:
            def package(self, r: Release) -> Result[Release, StepFailed]:
                return Err(StepFailed("package", "disk full"))

        builder = ReleaseBuilder(
            registry=_registry(tracker),
            console=MockConsole(),
            assembler=RecordingStep(),
            packager=FailingPackager(),
        )

        assert builder.build(release) == Err(StepFailed("package", "disk full"))
        assert tracker.archives == []
