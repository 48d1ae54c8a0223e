"""Release descriptor and profile.

A release has a profile, and so does an environment. When resolving the
configuration of a release for a given environment, the environment profile
overrides the release profile field by field (see ``Profile.merge``).

``Release`` is the state threaded through the lifecycle plugins. It is frozen:
plugins return a replacement built with ``dataclasses.replace`` rather than
mutating the value they receive.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path

from relpack.core.structured import StrDict, get_bool, get_str, get_str_list, get_table

__all__ = ["Profile", "Release", "is_release"]


def _str_mapping(table: Mapping[str, object], key: str) -> dict[str, str] | None:
    sub = get_table(table, key)
    if sub is None:
        return None
    out: dict[str, str] = {}
    for k, v in sub.items():
        if not isinstance(v, str):
            raise TypeError(f"'{key}.{k}' must be a string, got {v!r}")
        out[k] = v
    return out


def _bool_or_path(table: Mapping[str, object], key: str) -> bool | str | None:
    value = get_bool(table, key)
    if value is not None:
        return value
    return get_str(table, key)


@dataclass(frozen=True, slots=True)
class Profile:
    """Configuration profile for a release or an environment.

    Every field is optional; ``None`` means "not set here" so that merging can
    tell an explicit value from an absent one.
    """

    runtime_args: str | None = None  # path to a custom runtime args file
    config_file: str | None = None  # path to a custom runtime config file
    code_paths: tuple[str, ...] | None = None
    runtime_opts: str | None = None
    dev_mode: bool | None = None
    include_runtime: bool | str | None = None  # bool or path to a runtime
    include_src: bool | None = None
    include_system_libs: bool | str | None = None  # bool or path to libs
    strip_debug_info: bool | None = None
    overlay_vars: Mapping[str, str] | None = None
    overlays: tuple[str, ...] | None = None
    overrides: Mapping[str, str] | None = None
    commands: Mapping[str, str] | None = None
    pre_start_hook: str | None = None
    post_start_hook: str | None = None
    pre_stop_hook: str | None = None
    post_stop_hook: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Profile:
        """Build a profile from a parsed TOML table.

        Raises:
            TypeError: If a field has the wrong type.
        """
        return cls(
            runtime_args=get_str(data, "runtime_args"),
            config_file=get_str(data, "config_file"),
            code_paths=get_str_list(data, "code_paths"),
            runtime_opts=get_str(data, "runtime_opts"),
            dev_mode=get_bool(data, "dev_mode"),
            include_runtime=_bool_or_path(data, "include_runtime"),
            include_src=get_bool(data, "include_src"),
            include_system_libs=_bool_or_path(data, "include_system_libs"),
            strip_debug_info=get_bool(data, "strip_debug_info"),
            overlay_vars=_str_mapping(data, "overlay_vars"),
            overlays=get_str_list(data, "overlays"),
            overrides=_str_mapping(data, "overrides"),
            commands=_str_mapping(data, "commands"),
            pre_start_hook=get_str(data, "pre_start_hook"),
            post_start_hook=get_str(data, "post_start_hook"),
            pre_stop_hook=get_str(data, "pre_stop_hook"),
            post_stop_hook=get_str(data, "post_stop_hook"),
        )

    def merge(self, override: Profile) -> Profile:
        """Return a profile where every field set in ``override`` wins."""
        values = {
            f.name: getattr(override, f.name)
            if getattr(override, f.name) is not None
            else getattr(self, f.name)
            for f in fields(self)
        }
        return Profile(**values)

    def to_dict(self) -> StrDict:
        """Serialize the fields that are set (JSON friendly)."""
        out: StrDict = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, tuple):
                out[f.name] = list(value)
            elif isinstance(value, Mapping):
                out[f.name] = dict(value)
            else:
                out[f.name] = value
        return out


@dataclass(frozen=True, slots=True)
class Release:
    """In-progress release descriptor.

    Attributes:
        name: Release name (directory under rel/)
        version: Release version string
        applications: Applications bundled in the release
        output_dir: Release output directory (rel/<name>)
        profile: Effective profile (environment merged over release)
        environment: Environment the release is built for, if any
        archive_path: Set once the release has been packaged
    """

    name: str
    version: str
    output_dir: Path
    applications: tuple[str, ...] = ()
    profile: Profile = field(default_factory=Profile)
    environment: str | None = None
    archive_path: Path | None = None

    @property
    def version_dir(self) -> Path:
        """Directory holding the assembled files of this version."""
        return self.output_dir / "releases" / self.version

    @property
    def archive_name(self) -> str:
        return f"{self.name}-{self.version}.zip"

    def __str__(self) -> str:
        return f"{self.name}:{self.version}"


def is_release(value: object) -> bool:
    """Validity predicate for values returned by release-phase hooks."""
    return isinstance(value, Release)
