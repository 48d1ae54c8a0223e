"""The lifecycle contract plugins implement.

Define a plugin by subclassing ``Plugin`` and overriding any of the hooks:

    from dataclasses import replace

    from relpack.plugins import Plugin
    from relpack.release import Release


    class StampPlugin(Plugin):
        name = "stamp"

        def before_assembly(self, release: Release) -> Release | None:
            self.info("This is executed just prior to assembling the release")
            return replace(release, version=f"{release.version}+stamped")

        def after_cleanup(self, args: tuple[str, ...]) -> None:
            self.info("This is executed just after running cleanup")

``before_assembly``, ``after_assembly``, ``before_package`` and
``after_package`` receive the current ``Release``. Return a replacement
``Release`` to pass it on to the remaining plugins and to the build, or return
``None`` to leave it unchanged. Returning anything else fails the build.

``after_cleanup`` receives the cleanup command line arguments; its return
value is ignored, but an exception fails the cleanup.

Output should go through ``debug``/``info``/``notice``/``warn``/``error`` so it
follows the tool's verbosity settings.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum, auto
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from relpack.output.console import ConsoleProtocol
    from relpack.release.model import Release

__all__ = ["CleanupArgs", "DispatchMode", "Extension", "Phase", "Plugin", "plugin_name"]

type CleanupArgs = tuple[str, ...]


class DispatchMode(Enum):
    """How a phase invokes its hooks."""

    STATE = auto()  # each hook may replace the release passed to the next
    FIRE = auto()  # return values ignored, exceptions propagate


class Phase(StrEnum):
    """Lifecycle points, named after the hook method they invoke."""

    BEFORE_ASSEMBLY = "before_assembly"
    AFTER_ASSEMBLY = "after_assembly"
    BEFORE_PACKAGE = "before_package"
    AFTER_PACKAGE = "after_package"
    AFTER_CLEANUP = "after_cleanup"

    @property
    def mode(self) -> DispatchMode:
        if self is Phase.AFTER_CLEANUP:
            return DispatchMode.FIRE
        return DispatchMode.STATE


class Plugin:
    """Base class for lifecycle plugins. Every hook defaults to a no-op."""

    name: ClassVar[str | None] = None
    console: ConsoleProtocol | None = None

    def bind(self, console: ConsoleProtocol | None) -> None:
        """Attach the console used by the output helpers."""
        self.console = console

    def before_assembly(self, release: Release) -> Release | None:
        return None

    def after_assembly(self, release: Release) -> Release | None:
        return None

    def before_package(self, release: Release) -> Release | None:
        return None

    def after_package(self, release: Release) -> Release | None:
        return None

    def after_cleanup(self, args: CleanupArgs) -> object:
        return None

    # Output helpers

    def debug(self, message: str) -> None:
        if self.console is not None:
            self.console.debug(message)

    def info(self, message: str) -> None:
        if self.console is not None:
            self.console.info(message)

    def notice(self, message: str) -> None:
        if self.console is not None:
            self.console.notice(message)

    def warn(self, message: str) -> None:
        if self.console is not None:
            self.console.warning(message)

    def error(self, message: str) -> None:
        if self.console is not None:
            self.console.error(message)


def plugin_name(plugin: Plugin | type[Plugin]) -> str:
    """Identity used in logs and failures: ``name`` or ``module.QualName``."""
    cls = plugin if isinstance(plugin, type) else type(plugin)
    if cls.name:
        return cls.name
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True, slots=True, eq=False)
class Extension:
    """A discovered plugin, ready for dispatch.

    Attributes:
        name: Plugin identity (see ``plugin_name``)
        plugin: The plugin instance
        source: Where it was found: "registered", "config" or "entry_point"
    """

    name: str
    plugin: Plugin
    source: str = "registered"

    def implements(self, phase: Phase) -> bool:
        """True if the plugin overrides the hook for ``phase``."""
        own = getattr(type(self.plugin), phase.value, None)
        return own is not None and own is not getattr(Plugin, phase.value)

    def implemented_hooks(self) -> tuple[Phase, ...]:
        return tuple(phase for phase in Phase if self.implements(phase))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Extension):
            return NotImplemented
        return self.name == other.name and self.plugin is other.plugin

    def __hash__(self) -> int:
        return hash((self.name, id(self.plugin)))

    def __str__(self) -> str:
        return self.name
