"""Console output abstraction.

Services and plugins report progress through ``ConsoleProtocol`` instead of
printing directly. ``RichConsole`` is the production backend; ``MockConsole``
captures records for tests.

Severities, from quietest to loudest: debug (verbose only), info, notice,
warning, error, success.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    DEBUG = auto()  # Dimmed, only shown when verbose
    INFO = auto()  # Cyan, informational
    NOTICE = auto()  # Bold, noteworthy step
    WARNING = auto()  # Yellow
    ERROR = auto()  # Red
    SUCCESS = auto()  # Green
    DIM = auto()
    HEADER = auto()  # Section header

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output."""

    @property
    def verbose(self) -> bool:
        """Whether debug messages are shown."""
        ...

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        ...

    def debug(self, message: str) -> None:
        """Print a message only in verbose mode."""
        ...

    def info(self, message: str) -> None:
        ...

    def notice(self, message: str) -> None:
        ...

    def warning(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def success(self, message: str) -> None:
        ...

    def header(self, message: str) -> None:
        ...

    def newline(self) -> None:
        ...


class RichConsole:
    """Console implementation using Rich."""

    def __init__(self, *, verbose: bool = False) -> None:
        from rich.console import Console

        self._console = Console()
        self._verbose = verbose
        self._style_map = {
            Style.DEFAULT: "",
            Style.DEBUG: "dim",
            Style.INFO: "cyan",
            Style.NOTICE: "bold",
            Style.WARNING: "yellow",
            Style.ERROR: "red bold",
            Style.SUCCESS: "green",
            Style.DIM: "dim",
            Style.HEADER: "blue bold",
        }

    @property
    def verbose(self) -> bool:
        return self._verbose

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, highlight=False)
        else:
            self._console.print(message, highlight=False)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._console.print(f"[dim]==> {message}[/dim]", highlight=False)

    def info(self, message: str) -> None:
        self._console.print(f"[cyan]==> {message}[/cyan]", highlight=False)

    def notice(self, message: str) -> None:
        self._console.print(f"[bold]{message}[/bold]", highlight=False)

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]warning:[/yellow] {message}", highlight=False)

    def error(self, message: str) -> None:
        self._console.print(f"[red bold]error:[/red bold] {message}", highlight=False)

    def success(self, message: str) -> None:
        self._console.print(f"[green]==> {message}[/green]", highlight=False)

    def header(self, message: str) -> None:
        self._console.print(f"\n[blue bold]{message}[/blue bold]", highlight=False)

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for tests.

    Debug records are captured only when ``verbose`` is set, mirroring what a
    user would see.
    """

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    verbose: bool = False

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def debug(self, message: str) -> None:
        if self.verbose:
            self.outputs.append(OutputRecord(message, Style.DEBUG))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.INFO))

    def notice(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.NOTICE))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"warning: {message}", Style.WARNING))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"error: {message}", Style.ERROR))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.SUCCESS))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helpers

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        """Find all outputs containing a substring."""
        return [o for o in self.outputs if substring in o.message]

    def count(self, style: Style) -> int:
        return sum(1 for o in self.outputs if o.style == style)
