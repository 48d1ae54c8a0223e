"""Project detection and paths.

A project is the directory that holds the `rel/` folder. Releases are
assembled under `rel/<name>/` and configured by `rel/config.toml`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["Project", "detect_project", "find_project_upward"]


@dataclass(frozen=True, slots=True)
class Project:
    """A release project rooted at ``root``."""

    root: Path

    @property
    def rel_dir(self) -> Path:
        return self.root / "rel"

    @property
    def config_path(self) -> Path:
        """Path to rel/config.toml."""
        return self.rel_dir / "config.toml"

    def release_dir(self, name: str) -> Path:
        return self.rel_dir / name

    def __str__(self) -> str:
        return str(self.root)


def find_project_upward(start: Path) -> Path | None:
    """Search upward from start for a directory containing `rel/`."""
    for parent in (start, *start.parents):
        if (parent / "rel").is_dir():
            return parent
    return None


def detect_project(*, start_dir: Path | None = None, env_var: str = "RELPACK_ROOT") -> Project:
    """Detect the project root.

    Detection order:
    1. RELPACK_ROOT environment variable
    2. Search upward from start_dir (or cwd) for `rel/`
    3. start_dir (or cwd) itself
    """
    env_value = os.environ.get(env_var)
    if env_value:
        return Project(root=Path(env_value).expanduser().resolve())

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_project_upward(search_start)
    return Project(root=found or search_start)
