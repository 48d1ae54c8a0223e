"""Release data model: the release descriptor and its configuration profile."""

from __future__ import annotations

from .model import Profile, Release, is_release

__all__ = ["Profile", "Release", "is_release"]
