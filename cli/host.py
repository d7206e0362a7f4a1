"""Terminal implementation of the driver-loop host boundary."""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, TextIO

from termelm import HostConfig

from .elements.base import ResizeEvent, TerminalEvent, Wakeup
from .elements.terminal import ANSI, Dimensions, RawInputReader, Screen

logger = logging.getLogger(__name__)


@dataclass
class TerminalHost:
    """Host backed by a real terminal.

    Usage:
        host = TerminalHost.attach(sys.stdout)
        run_automat(host, Editor, from_event)

    Raw mode (and the alternate screen, if configured) is only active inside
    ``raw_mode()``; ``run_automat`` enters it for the duration of the run.

    Attributes:
        screen: Display target handed to the application's view
        reader: Keystroke reader owning the raw-mode state
        config: Cursor and alternate-screen settings
    """

    screen: Screen
    reader: RawInputReader = field(default_factory=RawInputReader)
    config: HostConfig = field(default_factory=HostConfig)
    _last_size: Dimensions | None = field(default=None, init=False, repr=False)

    @classmethod
    def attach(cls, out: TextIO = sys.stdout, config: HostConfig | None = None) -> TerminalHost:
        return cls(screen=Screen.attach(out), config=config or HostConfig())

    def get_screen_buffer(self) -> Screen:
        return self.screen

    def commit_screen_buffer(self, buffer: Screen) -> None:
        buffer.flush()

    def poll_events(self, timeout: float) -> TerminalEvent | None:
        """Next resize or key event, or None after ``timeout`` seconds.

        A resize during the wait wakes the reader, so it is reported as soon
        as it happens.
        """
        deadline = time.monotonic() + timeout
        while True:
            resized = self._check_resize()
            if resized is not None:
                return resized
            event = self.reader.read_nonblocking(max(deadline - time.monotonic(), 0.0))
            if not isinstance(event, Wakeup):
                return event
            logger.debug("reader woken, checking terminal size")

    def _check_resize(self) -> ResizeEvent | None:
        size = self.screen.dimensions()
        last, self._last_size = self._last_size, size
        if last is not None and size != last:
            logger.debug("terminal resized to %s", size)
            return ResizeEvent(size.width, size.height)
        return None

    @contextmanager
    def raw_mode(self) -> Iterator[TerminalHost]:
        """Enter raw mode; the terminal is restored on every exit path."""
        self.reader.start()
        self.reader.watch_resize()
        logger.debug("raw mode enabled")
        try:
            self.screen.queue(self._enter_sequence()).flush()
            yield self
        finally:
            try:
                self.screen.queue(self._leave_sequence()).flush()
            finally:
                self.reader.unwatch_resize()
                self.reader.stop()
                logger.debug("raw mode disabled")

    def _enter_sequence(self) -> str:
        seq = ANSI.ENABLE_BRACKETED_PASTE
        if self.config.alternate_screen:
            seq += ANSI.ENTER_ALT_SCREEN
        if self.config.hide_cursor:
            seq += ANSI.HIDE_CURSOR
        return seq

    def _leave_sequence(self) -> str:
        seq = ANSI.RESET + ANSI.DISABLE_BRACKETED_PASTE
        if self.config.hide_cursor:
            seq += ANSI.SHOW_CURSOR
        if self.config.alternate_screen:
            seq += ANSI.LEAVE_ALT_SCREEN
        return seq
