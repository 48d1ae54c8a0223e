"""Typed loading of rel/config.toml.

Example:

    default_release = "myapp"
    default_environment = "prod"

    [releases.myapp]
    version = "0.1.0"
    applications = ["myapp", "myapp_web"]

    [releases.myapp.profile]
    include_src = false

    [environments.prod.profile]
    include_runtime = true
    strip_debug_info = true

    [plugins]
    modules = ["myapp_release.plugins:Stamp"]
    paths = ["rel/plugins"]
    entry_points = true
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from relpack.release.model import Profile

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_bool, get_str, get_str_list, get_table

__all__ = [
    "Config",
    "ConfigError",
    "PluginsConfig",
    "ReleaseConfig",
    "load_config",
]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """One `[releases.<name>]` table."""

    name: str
    version: str
    applications: tuple[str, ...] = ()
    profile: Profile = field(default_factory=Profile)


@dataclass(frozen=True, slots=True)
class PluginsConfig:
    """The `[plugins]` table."""

    modules: tuple[str, ...] = ()
    paths: tuple[str, ...] = ()
    entry_points: bool = True


def _empty_releases() -> dict[str, ReleaseConfig]:
    return {}


def _empty_environments() -> dict[str, Profile]:
    return {}


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    releases: dict[str, ReleaseConfig] = field(default_factory=_empty_releases)
    environments: dict[str, Profile] = field(default_factory=_empty_environments)
    plugins: PluginsConfig = field(default_factory=PluginsConfig)
    default_release: str | None = None
    default_environment: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: If a release has no version.
            TypeError: If a field has the wrong type.
        """
        releases: dict[str, ReleaseConfig] = {}
        for name, raw in (get_table(data, "releases") or {}).items():
            table = as_str_dict(raw)
            if table is None:
                raise TypeError(f"releases.{name} must be a table")
            version = get_str(table, "version")
            if version is None:
                raise ValueError(f"releases.{name} is missing 'version'")
            releases[name] = ReleaseConfig(
                name=name,
                version=version,
                applications=get_str_list(table, "applications") or (name,),
                profile=Profile.from_dict(get_table(table, "profile") or {}),
            )

        environments: dict[str, Profile] = {}
        for name, raw in (get_table(data, "environments") or {}).items():
            table = as_str_dict(raw)
            if table is None:
                raise TypeError(f"environments.{name} must be a table")
            environments[name] = Profile.from_dict(get_table(table, "profile") or {})

        plugins: StrDict = get_table(data, "plugins") or {}
        entry_points = get_bool(plugins, "entry_points")

        return cls(
            releases=releases,
            environments=environments,
            plugins=PluginsConfig(
                modules=get_str_list(plugins, "modules") or (),
                paths=get_str_list(plugins, "paths") or (),
                entry_points=True if entry_points is None else entry_points,
            ),
            default_release=get_str(data, "default_release"),
            default_environment=get_str(data, "default_environment"),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling IO and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data = as_str_dict(tomllib.loads(content.decode("utf-8")))
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))
