"""The contract a consumer state machine implements.

An application is a class whose instances are the model. The driver loop
owns the single instance for the whole run and is the only caller of its
methods:

    init()          once, before the first render
    update(msg)     may mutate the model, returns the next command
    view(display)   reads the model, writes into the display

Applications do not inherit from anything; matching the protocol is enough.
"""

from __future__ import annotations

from typing import Never, Protocol, Self, TypeVar

from .cmd import Cmd

Msg = TypeVar("Msg")
Display = TypeVar("Display", contravariant=True)

__all__ = ["Application", "assert_never"]


def assert_never(value: Never) -> Never:
    """Assert that a value is never reached (for exhaustive pattern matching).

    Usage:
        def update(self, msg: Message) -> Cmd[Message]:
            match msg:
                case SetName(name=name):
                    ...
                case Resized(width=w, height=h):
                    ...
                case _:
                    assert_never(msg)  # Type error if cases missed
    """
    raise AssertionError(f"Unexpected value: {value!r}")


class Application(Protocol[Msg, Display]):
    """Protocol for driver-loop applications.

    Example:
        >>> @dataclass
        ... class Counter:
        ...     count: int = 0
        ...
        ...     @classmethod
        ...     def init(cls) -> tuple[Counter, Cmd[int]]:
        ...         return cls(), Cmd.none()
        ...
        ...     def update(self, msg: int) -> Cmd[int]:
        ...         self.count += msg
        ...         return Cmd.none()
        ...
        ...     def view(self, display: Screen) -> None:
        ...         display.queue(f"{self.count}")
    """

    @classmethod
    def init(cls) -> tuple[Self, Cmd[Msg]]:
        """Return the initial model and the first command."""
        ...

    def update(self, msg: Msg) -> Cmd[Msg]:
        """Apply ``msg`` to the model and describe what happens next.

        Must handle every message the application can receive; an unmatched
        message is a programming error, not a runtime condition.
        """
        ...

    def view(self, display: Display) -> None:
        """Render the model into ``display``. Must not mutate the model.

        Raise to signal failure; the driver loop treats it as fatal.
        """
        ...
