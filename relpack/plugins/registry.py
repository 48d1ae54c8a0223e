"""Plugin registry - finds the plugins taking part in a release.

Plugins come from three places, always scanned in this order:

1. Plugins registered in code with ``PluginRegistry.register``
2. Modules listed under ``[plugins] modules`` in rel/config.toml, in order
3. Entry points of the ``relpack.plugins`` group, sorted by name

A candidate takes part if it is a ``Plugin`` subclass (instantiated once with
no arguments), a ``Plugin`` instance, or a module defining ``Plugin``
subclasses. Anything else, or anything that fails to import, is skipped
without failing the build. A plugin reachable from several places is only
returned once, at its first position.

Usage:
    registry = PluginRegistry.from_config(config.plugins, root=project.root)
    for ext in registry.discover():
        print(ext.name, [str(p) for p in ext.implemented_hooks()])
"""

from __future__ import annotations

import importlib
import inspect
import sys
from collections.abc import Iterable, Iterator
from importlib.metadata import entry_points
from pathlib import Path
from types import ModuleType
from typing import TYPE_CHECKING, TypeGuard

from .contract import Extension, Plugin, plugin_name

if TYPE_CHECKING:
    from relpack.core.config import PluginsConfig
    from relpack.output.console import ConsoleProtocol

__all__ = ["ENTRY_POINT_GROUP", "PluginRegistry"]

ENTRY_POINT_GROUP = "relpack.plugins"


def _load_target(target: str) -> object:
    """Import ``pkg.module`` or ``pkg.module:Attr.path``."""
    module_name, _, attr_path = target.partition(":")
    obj: object = importlib.import_module(module_name.strip())
    for attr in filter(None, attr_path.strip().split(".")):
        obj = getattr(obj, attr)
    return obj


def _is_plugin_class(obj: object) -> TypeGuard[type[Plugin]]:
    return isinstance(obj, type) and issubclass(obj, Plugin) and obj is not Plugin


def _module_plugins(module: ModuleType) -> list[type[Plugin]]:
    """Plugin subclasses defined in a module, sorted by qualified name."""
    found = [
        obj
        for _, obj in inspect.getmembers(module, inspect.isclass)
        if _is_plugin_class(obj) and obj.__module__ == module.__name__
    ]
    return sorted(found, key=lambda cls: cls.__qualname__)


def _expand(source: str, label: str, loaded: object) -> Iterator[tuple[str, str, object]]:
    """Yield the candidates behind a loaded target; a module yields its plugin classes."""
    if isinstance(loaded, ModuleType):
        for cls in _module_plugins(loaded):
            yield source, label, cls
    else:
        yield source, label, loaded


class PluginRegistry:
    """Discovers lifecycle plugins.

    The registry keeps one instance per plugin class, so repeated calls to
    ``discover`` return the same extensions as long as the environment does
    not change.
    """

    def __init__(
        self,
        *,
        modules: Iterable[str] = (),
        paths: Iterable[Path] = (),
        use_entry_points: bool = True,
        group: str = ENTRY_POINT_GROUP,
        console: ConsoleProtocol | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            modules: Module targets ("pkg.mod" or "pkg.mod:Class")
            paths: Directories made importable before scanning
            use_entry_points: Whether to scan installed entry points
            group: Entry point group name
            console: Console for skip diagnostics and plugin output
        """
        self._modules = tuple(modules)
        self._paths = tuple(paths)
        self._use_entry_points = use_entry_points
        self._group = group
        self._console = console
        self._registered: list[Plugin | type[Plugin]] = []
        self._instances: dict[type[Plugin], Plugin] = {}

    @classmethod
    def from_config(
        cls,
        config: PluginsConfig,
        *,
        root: Path,
        console: ConsoleProtocol | None = None,
    ) -> PluginRegistry:
        """Build a registry from the `[plugins]` table.

        Relative plugin paths are resolved against the project root.
        """
        return cls(
            modules=config.modules,
            paths=[p if p.is_absolute() else root / p for p in map(Path, config.paths)],
            use_entry_points=config.entry_points,
            console=console,
        )

    @property
    def group(self) -> str:
        return self._group

    def register(self, plugin: Plugin | type[Plugin]) -> None:
        """Register a plugin class or instance explicitly.

        Raises:
            TypeError: If ``plugin`` is not a Plugin subclass or instance.
        """
        if not isinstance(plugin, Plugin) and not _is_plugin_class(plugin):
            raise TypeError(f"not a lifecycle plugin: {plugin!r}")
        self._registered.append(plugin)

    def discover(self) -> tuple[Extension, ...]:
        """Return the ordered plugins available in the current environment."""
        self._prepare_paths()

        extensions: list[Extension] = []
        seen: set[int] = set()
        for source, label, candidate in self._candidates():
            plugin = self._resolve(label, candidate)
            if plugin is None or id(plugin) in seen:
                continue
            seen.add(id(plugin))
            plugin.bind(self._console)
            extensions.append(Extension(name=plugin_name(plugin), plugin=plugin, source=source))
        return tuple(extensions)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _debug(self, message: str) -> None:
        if self._console is not None:
            self._console.debug(message)

    def _prepare_paths(self) -> None:
        changed = False
        for path in self._paths:
            entry = str(path.resolve())
            if entry not in sys.path:
                sys.path.insert(0, entry)
                changed = True
        if changed or self._modules:
            importlib.invalidate_caches()

    def _candidates(self) -> Iterator[tuple[str, str, object]]:
        for obj in self._registered:
            yield "registered", repr(obj), obj

        for target in self._modules:
            try:
                loaded = _load_target(target)
            except Exception as e:
                self._debug(f"Skipping plugin module {target}: {e}")
                continue
            yield from _expand("config", target, loaded)

        if not self._use_entry_points:
            return
        for ep in sorted(entry_points(group=self._group), key=lambda e: (e.name, e.value)):
            try:
                loaded = ep.load()
            except Exception as e:
                self._debug(f"Skipping plugin entry point {ep.name} ({ep.value}): {e}")
                continue
            yield from _expand("entry_point", ep.name, loaded)

    def _resolve(self, label: str, candidate: object) -> Plugin | None:
        if isinstance(candidate, Plugin):
            return candidate
        if not _is_plugin_class(candidate):
            self._debug(f"Skipping {label}: does not implement the plugin lifecycle")
            return None

        cached = self._instances.get(candidate)
        if cached is not None:
            return cached
        try:
            instance = candidate()
        except Exception as e:
            self._debug(f"Skipping {label}: could not instantiate {candidate.__qualname__}: {e}")
            return None
        self._instances[candidate] = instance
        return instance
