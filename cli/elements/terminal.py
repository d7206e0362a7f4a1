"""Terminal control for the driver-loop backend.

This module provides:
- ANSI: Centralized terminal escape sequences and helpers
- decode_keys: Turns raw terminal input into InputEvents
- RawInputReader: Raw-mode guard and bounded-wait key reader
- Screen: Buffered display target committed once per frame
"""

from __future__ import annotations

import codecs
import io
import os
import re
import select
import shutil
import signal
import sys
import termios
import threading
import time
import tty
from collections import deque
from dataclasses import dataclass
from typing import Any, TextIO

import wcwidth
from rich.console import Console, RenderableType

from .base import InputEvent, Wakeup

# Timeout to distinguish standalone Escape from escape sequences (arrow keys, etc.)
# Arrow keys send: ESC [ A/B/C/D - we wait this long after ESC to see if more comes
ESCAPE_SEQUENCE_TIMEOUT = 0.025  # 25ms

PASTE_START = "\x1b[200~"
PASTE_END = "\x1b[201~"


class ANSI:
    """Centralized ANSI escape sequences and terminal control helpers.

    Usage:
        from .terminal import ANSI

        # Colors
        screen.queue(f"{ANSI.CYAN}colored text{ANSI.RESET}")

        # Cursor control (returns escape string)
        screen.queue(ANSI.move_to(5, 10))
    """

    # Colors
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    REVERSE = "\033[7m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    GRAY = "\033[90m"

    # Cursor visibility
    HIDE_CURSOR = "\033[?25l"
    SHOW_CURSOR = "\033[?25h"

    # Line control
    CLEAR_LINE = "\033[2K"
    CLEAR_TO_END = "\033[K"  # Erase from cursor to end of line
    CARRIAGE_RETURN = "\r"
    ENABLE_BRACKETED_PASTE = "\033[?2004h"
    DISABLE_BRACKETED_PASTE = "\033[?2004l"

    # Screen control
    CLEAR_SCREEN = "\033[2J"  # Clear entire screen
    MOVE_HOME = "\033[H"  # Move cursor to home position (1,1)
    ENTER_ALT_SCREEN = "\033[?1049h"
    LEAVE_ALT_SCREEN = "\033[?1049l"

    # Pattern to match ANSI escape sequences (for stripping)
    _ANSI_PATTERN = re.compile(r"\033\[[0-9;?]*[A-Za-z]")

    @classmethod
    def move_to(cls, col: int, row: int) -> str:
        """Move cursor to zero-based column/row."""
        return f"\033[{row + 1};{col + 1}H"

    @classmethod
    def cursor_up(cls, n: int = 1) -> str:
        """Move cursor up n lines."""
        return f"\033[{n}A" if n > 0 else ""

    @classmethod
    def cursor_down(cls, n: int = 1) -> str:
        """Move cursor down n lines."""
        return f"\033[{n}B" if n > 0 else ""

    @classmethod
    def _get_char_width(cls, char: str) -> int:
        """Get visual width of character (0 for control, 1-2 for normal).

        Uses wcwidth for proper handling of:
        - Wide characters (CJK, emoji): return 2
        - Normal characters: return 1
        - Control characters, combining marks: return 0
        """
        w = wcwidth.wcwidth(char)
        return w if w > 0 else 0

    @classmethod
    def strip_ansi(cls, s: str) -> str:
        """Remove ANSI escape sequences from string."""
        return cls._ANSI_PATTERN.sub("", s)

    @classmethod
    def visual_len(cls, s: str) -> int:
        """Calculate visual length of string, excluding ANSI escape codes."""
        return sum(cls._get_char_width(char) for char in cls.strip_ansi(s))

    @classmethod
    def truncate_to_width(cls, s: str, max_width: int, ellipsis: str = "…") -> str:
        """Truncate plain text to max visual width, adding ellipsis if cut."""
        if max_width <= 0:
            return ""
        if cls.visual_len(s) <= max_width:
            return s

        target_width = max_width - cls.visual_len(ellipsis)
        if target_width <= 0:
            return ellipsis[:max_width]

        result = []
        visual_pos = 0
        for char in s:
            char_width = cls._get_char_width(char)
            if visual_pos + char_width > target_width:
                break  # Would exceed width
            result.append(char)
            visual_pos += char_width
        return "".join(result) + ellipsis


# =============================================================================
# Key decoding
# =============================================================================

_CSI_KEYS = {
    "A": "Up",
    "B": "Down",
    "C": "Right",
    "D": "Left",
    "H": "Home",
    "F": "End",
    "Z": "BackTab",
}

_SS3_KEYS = {**_CSI_KEYS, "P": "F1", "Q": "F2", "R": "F3", "S": "F4"}

_TILDE_KEYS = {
    "1": "Home",
    "2": "Insert",
    "3": "Delete",
    "4": "End",
    "5": "PageUp",
    "6": "PageDown",
    "7": "Home",
    "8": "End",
}


def _is_csi_final(ch: str) -> bool:
    # CSI final bytes range from 0x40-0x7E
    return "\x40" <= ch <= "\x7e"


def _decode_plain(ch: str) -> InputEvent:
    """Decode a single non-escape character."""
    if ch == "\r":
        return InputEvent(key="Enter")
    if ch == "\n":
        # Treat Ctrl+J (LF) as a control key, not Enter
        return InputEvent(key="j", char="j", ctrl=True)
    if ch == "\t":
        return InputEvent(key="Tab")
    if ch in ("\x7f", "\x08"):
        return InputEvent(key="Backspace")
    if ch == "\x00":
        return InputEvent(key="Space", char=" ", ctrl=True)
    if ord(ch) < 32:
        # Map Ctrl+<letter> to its letter (Ctrl+A -> "a", etc.)
        letter = chr(ord(ch) + 96)
        if "a" <= letter <= "z":
            return InputEvent(key=letter, char=letter, ctrl=True)
        return InputEvent(key=ch, ctrl=True)
    return InputEvent(key=ch, char=ch)


def _decode_csi(params: str, final: str) -> InputEvent:
    """Decode ``ESC [ params final``, including xterm modifier parameters."""
    parts = params.split(";")
    modifier = int(parts[1]) - 1 if len(parts) > 1 and parts[1].isdigit() else 0
    if final == "~":
        name = _TILDE_KEYS.get(parts[0])
    else:
        name = _CSI_KEYS.get(final)
    return InputEvent(
        key=name or "Unknown",
        ctrl=bool(modifier & 4),
        alt=bool(modifier & 2),
    )


def _decode_escape(text: str, i: int) -> tuple[InputEvent, int]:
    """Decode the escape sequence starting at ``text[i]``."""
    if text.startswith(PASTE_START, i):
        start = i + len(PASTE_START)
        end = text.find(PASTE_END, start)
        if end == -1:
            return InputEvent(key="Paste", char=text[start:]), len(text)
        return InputEvent(key="Paste", char=text[start:end]), end + len(PASTE_END)

    nxt = text[i + 1] if i + 1 < len(text) else ""
    if nxt == "[":
        j = i + 2
        while j < len(text) and not _is_csi_final(text[j]):
            j += 1
        if j >= len(text):
            return InputEvent(key="Unknown"), len(text)
        return _decode_csi(text[i + 2 : j], text[j]), j + 1
    if nxt == "O" and i + 2 < len(text):
        return InputEvent(key=_SS3_KEYS.get(text[i + 2], "Unknown")), i + 3
    if nxt and nxt != "\x1b":
        inner = _decode_plain(nxt)
        return InputEvent(key=inner.key, char=inner.char, ctrl=inner.ctrl, alt=True), i + 2
    # No sequence found - plain Escape
    return InputEvent(key="Escape"), i + 1


def decode_keys(text: str) -> list[InputEvent]:
    """Decode everything read from the terminal in one go.

    A single read can hold several keys (fast typing, pastes without
    bracketed paste), so this returns all of them in order.
    """
    events: list[InputEvent] = []
    i = 0
    while i < len(text):
        if text[i] == "\x1b":
            event, i = _decode_escape(text, i)
        else:
            event, i = _decode_plain(text[i]), i + 1
        events.append(event)
    return events


def _incomplete_escape(text: str) -> bool:
    """Check whether ``text`` ends in the middle of an escape sequence."""
    paste = text.rfind(PASTE_START)
    if paste != -1 and text.find(PASTE_END, paste) == -1:
        return True
    start = text.rfind("\x1b")
    if start == -1:
        return False
    tail = text[start:]
    if tail == "\x1b":
        return True
    return tail.startswith("\x1b[") and not any(_is_csi_final(c) for c in tail[2:])


class RawInputReader:
    """Reads keystrokes from the terminal in raw mode.

    ``watch_resize()`` installs a SIGWINCH handler that wakes a pending
    ``read_nonblocking`` through a self-pipe, so a resize is noticed while
    waiting for keys rather than after the wait ends.
    """

    def __init__(self, fd: int | None = None) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.old_settings: list[Any] | None = None
        self._pending: deque[InputEvent] = deque()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._wake_r: int | None = None
        self._wake_w: int | None = None
        self._old_sigwinch: Any = None
        self._sigwinch_installed = False

    @property
    def is_raw(self) -> bool:
        return self.old_settings is not None

    def start(self) -> None:
        """Enter raw mode and flush any pending input.

        This method is idempotent - calling it when already started is a no-op.
        """
        if self.old_settings is not None:
            return  # Already started - no-op
        self.old_settings = termios.tcgetattr(self.fd)
        # Flush any pending input to avoid stale keystrokes
        termios.tcflush(self.fd, termios.TCIFLUSH)
        tty.setraw(self.fd)
        # Re-enable output post-processing so '\n' moves to column 1.
        attrs = termios.tcgetattr(self.fd)
        attrs[1] |= termios.OPOST | termios.ONLCR
        termios.tcsetattr(self.fd, termios.TCSADRAIN, attrs)

    def stop(self) -> None:
        """Restore terminal settings."""
        if self.old_settings is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self.old_settings)
            self.old_settings = None

    def watch_resize(self) -> None:
        """Wake ``read_nonblocking`` whenever SIGWINCH arrives.

        Signal handlers can only be installed from the main thread; elsewhere
        only explicit ``wake()`` calls interrupt a read.
        """
        if self._wake_r is not None:
            return
        self._wake_r, self._wake_w = os.pipe()
        os.set_blocking(self._wake_w, False)
        if threading.current_thread() is threading.main_thread():
            self._old_sigwinch = signal.signal(signal.SIGWINCH, self._sigwinch_handler)
            self._sigwinch_installed = True

    def unwatch_resize(self) -> None:
        """Restore the previous SIGWINCH handler and close the wake-up pipe."""
        if self._wake_r is None or self._wake_w is None:
            return
        if self._sigwinch_installed:
            # None means the old handler was not installed from Python
            signal.signal(signal.SIGWINCH, self._old_sigwinch or signal.SIG_DFL)
            self._old_sigwinch = None
            self._sigwinch_installed = False
        os.close(self._wake_r)
        os.close(self._wake_w)
        self._wake_r = self._wake_w = None

    def wake(self) -> None:
        """Make a pending (or the next) ``read_nonblocking`` return ``Wakeup``."""
        if self._wake_w is None:
            return
        try:
            os.write(self._wake_w, b"\0")
        except BlockingIOError:
            pass  # pipe full, a wake-up is already pending

    def _sigwinch_handler(self, signum: int, frame: Any) -> None:
        self.wake()

    def read_nonblocking(self, timeout: float = 0.0) -> InputEvent | Wakeup | None:
        """Wait up to ``timeout`` seconds for the next key.

        Returns None only if nothing arrived in time, and ``Wakeup`` if
        ``wake()`` (or SIGWINCH) interrupted the wait.

        Raises:
            EOFError: The input stream was closed.
        """
        if self._pending:
            return self._pending.popleft()

        deadline = time.monotonic() + timeout
        while True:
            ready = self._select(max(deadline - time.monotonic(), 0.0))
            if not ready:
                return None
            if self._wake_r is not None and self._wake_r in ready:
                os.read(self._wake_r, 4096)
                return Wakeup()

            text = self._read_available()
            # Give split escape sequences and characters a moment to arrive in full
            while self._incomplete(text) and select.select(
                [self.fd], [], [], ESCAPE_SEQUENCE_TIMEOUT
            )[0]:
                text += self._read_available()

            self._pending.extend(decode_keys(text))
            if self._pending:
                return self._pending.popleft()
            # Only part of a multibyte character so far; keep waiting

    def _select(self, timeout: float) -> list[int]:
        fds = [self.fd] if self._wake_r is None else [self.fd, self._wake_r]
        return select.select(fds, [], [], timeout)[0]

    def _incomplete(self, text: str) -> bool:
        return _incomplete_escape(text) or bool(self._decoder.getstate()[0])

    def _read_available(self) -> str:
        data = os.read(self.fd, 4096)
        if not data:
            raise EOFError("terminal input closed")
        return self._decoder.decode(data)


# =============================================================================
# Screen
# =============================================================================


@dataclass(frozen=True)
class Dimensions:
    """Terminal size in character cells."""

    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class Screen:
    """Buffered display target.

    ``view`` queues text and escape sequences; nothing reaches the terminal
    until ``flush`` writes the whole frame at once.

    Usage:
        screen = Screen.attach(sys.stdout)
        screen.clear().move_to(5, 10).queue("Hello")
        screen.print(Text("status", style="reverse"))
        screen.flush()
    """

    def __init__(self, out: TextIO, size: tuple[int, int] | None = None) -> None:
        self._out = out
        self._buffer = io.StringIO()
        self._fixed_size = size

    @classmethod
    def attach(cls, out: TextIO) -> Screen:
        return cls(out)

    def dimensions(self) -> Dimensions:
        """Current size; a size given at construction wins (for tests)."""
        if self._fixed_size is not None:
            return Dimensions(*self._fixed_size)
        size = shutil.get_terminal_size()
        return Dimensions(size.columns, size.lines)

    def queue(self, text: str) -> Screen:
        """Append raw text or escape sequences to the frame."""
        self._buffer.write(text)
        return self

    def move_to(self, col: int, row: int) -> Screen:
        return self.queue(ANSI.move_to(col, row))

    def clear(self) -> Screen:
        return self.queue(ANSI.CLEAR_SCREEN + ANSI.MOVE_HOME)

    def print(self, renderable: RenderableType, width: int | None = None) -> Screen:
        """Render a Rich renderable into the frame on a single line.

        Args:
            renderable: Text or any Rich renderable
            width: Columns available; defaults to the terminal width
        """
        console = Console(
            file=self._buffer,
            force_terminal=True,
            color_system="standard",
            width=width or self.dimensions().width,
            highlight=False,
        )
        console.print(renderable, end="", no_wrap=True, overflow="ellipsis", crop=True)
        return self

    def pending(self) -> str:
        """Text queued since the last flush."""
        return self._buffer.getvalue()

    def flush(self) -> None:
        """Write the frame to the terminal and start a new one."""
        self._out.write(self._buffer.getvalue())
        self._out.flush()
        self._buffer = io.StringIO()
