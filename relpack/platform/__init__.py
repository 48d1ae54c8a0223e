"""Filesystem helpers shared by the release services."""

from .files import atomic_write_text, remove_tree

__all__ = ["atomic_write_text", "remove_tree"]
