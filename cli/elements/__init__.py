"""Terminal backend elements.

This module provides the pieces ``TerminalHost`` is built from.

Usage:
    from cli.elements import RawInputReader, Screen

    screen = Screen.attach(sys.stdout)
    reader = RawInputReader()
    reader.start()
    try:
        event = reader.read_nonblocking(timeout=1.0)
    finally:
        reader.stop()
"""

from .base import InputEvent, ResizeEvent, TerminalEvent, Wakeup
from .terminal import ANSI, Dimensions, RawInputReader, Screen, decode_keys

__all__ = [
    # Events
    "InputEvent",
    "ResizeEvent",
    "TerminalEvent",
    "Wakeup",
    # Terminal
    "ANSI",
    "Dimensions",
    "RawInputReader",
    "Screen",
    "decode_keys",
]
