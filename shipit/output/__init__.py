"""Output formatting module."""

from shipit.output.console import ConsoleProtocol, MockConsole, RichConsole, Style

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "RichConsole",
    "Style",
]
