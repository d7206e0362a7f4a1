"""Exceptions raised by the driver loop.

This module provides:
- AutomatError: Base class for every fatal driver-loop failure
- RenderError, CommitError: Failures at the display boundary
- EffectError: A raw (not fetch-wrapped) deferred computation raised
- PollError, EventTimeout: Failures at the event boundary

Every error wraps the original exception as ``__cause__`` so callers can
still see what went wrong underneath.
"""

from __future__ import annotations

__all__ = [
    "AutomatError",
    "RenderError",
    "CommitError",
    "EffectError",
    "PollError",
    "EventTimeout",
]


class AutomatError(Exception):
    """Fatal driver-loop failure.

    Example:
        >>> try:
        ...     run_automat(host, Editor, Message.from_event)
        ... except AutomatError as e:
        ...     print(f"{e.stage}: {e}")
    """

    stage: str = "loop"

    def __init__(self, message: str, iteration: int | None = None):
        """Initialize AutomatError.

        Args:
            message: Human-readable error description
            iteration: Loop iteration at which the failure happened
        """
        self.iteration = iteration
        super().__init__(f"[{self.stage}] {message}")


class RenderError(AutomatError):
    """The application's view raised."""

    stage = "render"


class CommitError(AutomatError):
    """Flushing the display to the terminal raised."""

    stage = "commit"


class EffectError(AutomatError):
    """A suspended computation raised.

    Computations wrapped with ``Resource.fetch`` never produce this error;
    their failures are delivered to the application as messages instead.
    """

    stage = "effect"


class PollError(AutomatError):
    """Polling the host for the next event raised."""

    stage = "poll"


class EventTimeout(AutomatError):
    """No event arrived within the poll timeout (``"fail"`` policy only)."""

    stage = "poll"

    def __init__(self, timeout: float, iteration: int | None = None):
        self.timeout = timeout
        super().__init__(
            f"Timed out waiting for the world after {timeout:g}s", iteration
        )
