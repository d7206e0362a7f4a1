"""Events produced by the terminal backend.

This module provides:
- InputEvent: A single decoded keystroke (or paste)
- ResizeEvent: The terminal changed size between two polls
- Wakeup: The reader was woken (by SIGWINCH) before any key arrived
- TerminalEvent: Union of everything ``TerminalHost.poll_events`` returns
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class InputEvent:
    """A decoded keystroke.

    Attributes:
        key: Key name ("Enter", "Up", "Backspace", ...) or the character itself
        char: Printable text carried by the key, if any
        ctrl: Control was held
        alt: Alt/Meta was held (ESC prefix)
    """

    key: str
    char: str | None = None
    ctrl: bool = False
    alt: bool = False

    def describe(self) -> str:
        """Human-readable chord, e.g. ``Ctrl+q`` or ``Alt+x``."""
        prefix = ""
        if self.ctrl:
            prefix += "Ctrl+"
        if self.alt:
            prefix += "Alt+"
        if self.key == "Paste":
            return f"Paste({len(self.char or '')})"
        return prefix + self.key


@dataclass(frozen=True)
class ResizeEvent:
    """The terminal now has ``width`` columns and ``height`` rows."""

    width: int
    height: int


@dataclass(frozen=True)
class Wakeup:
    """A pending read was interrupted, usually because the terminal resized."""


TerminalEvent = InputEvent | ResizeEvent
