"""Console output abstraction.

Services and the pipeline driver print through ``ConsoleProtocol`` so they
never depend on rich directly. ``RichConsole`` is the production backend and
``MockConsole`` records output for tests.
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
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Interface for styled console output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def skipped(self, message: str) -> None:
        """Print a dimmed "skip" line for a disabled step."""
        ...

    def header(self, message: str) -> None: ...

    def newline(self) -> None: ...


# Rich style per Style; DEFAULT prints unstyled.
RICH_STYLES: dict[Style, str] = {
    Style.DEFAULT: "",
    Style.SUCCESS: "green",
    Style.ERROR: "red bold",
    Style.WARNING: "yellow",
    Style.INFO: "cyan",
    Style.DIM: "dim",
    Style.BOLD: "bold",
    Style.HEADER: "blue bold",
}

# Leading word of each message level. The rest of the line is unstyled.
LEVEL_PREFIXES: dict[Style, str] = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}


class RichConsole:
    """Console implementation backed by rich. Markup in messages is escaped."""

    def __init__(self, *, stderr: bool = False) -> None:
        # Import rich lazily to keep imports cheap for library users.
        from rich.console import Console

        self._console = Console(stderr=stderr, highlight=False)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=RICH_STYLES.get(style) or None, markup=False)

    def _level(self, style: Style, message: str) -> None:
        tag = RICH_STYLES[style]
        self._console.print(f"[{tag}]{LEVEL_PREFIXES[style]}[/{tag}] {_escape(message)}")

    def success(self, message: str) -> None:
        self._level(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._level(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._level(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._level(Style.INFO, message)

    def skipped(self, message: str) -> None:
        self._console.print(f"skip {message}", style="dim", markup=False)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style=RICH_STYLES[Style.HEADER], markup=False)

    def newline(self) -> None:
        self._console.print()


def _escape(text: str) -> str:
    from rich.markup import escape

    return escape(text)


@dataclass
class OutputRecord:
    """One line captured by MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Records every line instead of printing it; used by tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def _record(self, message: str, style: Style) -> None:
        self.outputs.append(OutputRecord(message, style))

    def _level(self, style: Style, message: str) -> None:
        self._record(f"{LEVEL_PREFIXES[style]} {message}", style)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._record(message, style)

    def success(self, message: str) -> None:
        self._level(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._level(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._level(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._level(Style.INFO, message)

    def skipped(self, message: str) -> None:
        self._record(f"skip {message}", Style.DIM)

    def header(self, message: str) -> None:
        self._record(message, Style.HEADER)

    def newline(self) -> None:
        self._record("", Style.DEFAULT)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style is Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style is Style.WARNING for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
