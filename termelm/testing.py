"""Scripted host for driving applications without a terminal.

Example:
    >>> host = RecordingHost(events=[KeyPress("a"), None, KeyPress("q")])
    >>> run_automat(host, Editor, Message.from_event)
    >>>
    >>> assert host.raw_mode_exits == 1
    >>> assert host.polls == 3
    >>> assert host.frames[-1] == ["..."]
"""

from __future__ import annotations

from collections import deque
from contextlib import contextmanager
from typing import Generic, Iterable, Iterator, TypeVar

Event = TypeVar("Event")

__all__ = ["RecordingDisplay", "RecordingHost", "ScriptExhausted"]


class ScriptExhausted(RuntimeError):
    """The application polled for more events than were scripted."""


class RecordingDisplay:
    """Display target that collects lines written by ``view``."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def write(self, line: str) -> None:
        self.lines.append(line)

    def take(self) -> list[str]:
        """Return the pending lines and start a fresh frame."""
        lines, self.lines = self.lines, []
        return lines


class RecordingHost(Generic[Event]):
    """Host that serves scripted events and records every interaction.

    Attributes:
        frames: Committed frames, one list of lines per commit.
        polls: Timeouts passed to each poll call, in order.
        raw_mode_enters: Number of times raw mode was entered.
        raw_mode_exits: Number of times raw mode was restored.

    A ``None`` entry in ``events`` stands for a poll that timed out.
    """

    def __init__(self, events: Iterable[Event | None] = ()) -> None:
        self.display = RecordingDisplay()
        self._events: deque[Event | None] = deque(events)
        self.frames: list[list[str]] = []
        self.polls: list[float] = []
        self.raw_mode_enters = 0
        self.raw_mode_exits = 0

    def poll_events(self, timeout: float) -> Event | None:
        self.polls.append(timeout)
        if not self._events:
            raise ScriptExhausted(f"no scripted event left for poll #{len(self.polls)}")
        return self._events.popleft()

    def commit_screen_buffer(self, buffer: RecordingDisplay) -> None:
        self.frames.append(buffer.take())

    def get_screen_buffer(self) -> RecordingDisplay:
        return self.display

    @contextmanager
    def raw_mode(self) -> Iterator[RecordingHost[Event]]:
        self.raw_mode_enters += 1
        try:
            yield self
        finally:
            self.raw_mode_exits += 1

    @property
    def renders(self) -> int:
        """Number of committed frames."""
        return len(self.frames)

    def pending_events(self) -> int:
        return len(self._events)
