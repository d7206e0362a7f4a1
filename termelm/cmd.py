"""Effect descriptions returned by ``update``.

A ``Cmd`` describes what the driver loop should do next; it never does
anything by itself. The set of variants is closed:

    Empty      nothing to do; resume a pending continuation or poll for input
    Suspend    run a one-shot computation and feed its message to update
    Dispatch   feed a message to update right away
    AndThen    run ``current`` to exhaustion, then ``then``
    Gtfo       stop the driver loop

Example:
    >>> def update(self, msg: Message) -> Cmd[Message]:
    ...     match msg:
    ...         case Quit():
    ...             return Cmd.gtfo()
    ...         case Rename(name=name):
    ...             self.name = name
    ...             return Cmd.dispatch(Saved()).and_then(Cmd.dispatch(Redraw()))
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

Msg = TypeVar("Msg")

__all__ = [
    "Cmd",
    "Empty",
    "Suspend",
    "Dispatch",
    "AndThen",
    "Gtfo",
    "none",
    "suspend",
    "dispatch",
    "gtfo",
    "request_size",
]


class Cmd(Generic[Msg]):
    """Base of the effect-description variants.

    Use the static constructors rather than instantiating variants directly.
    """

    __slots__ = ()

    @staticmethod
    def none() -> Cmd[Any]:
        """No effect."""
        return Empty()

    @staticmethod
    def suspend(effect: Callable[[], Msg]) -> Cmd[Msg]:
        """Defer ``effect`` until the driver loop reaches it.

        The callable takes no arguments and returns a message. It may block
        and it may raise; a raised exception is fatal to the loop unless the
        computation was wrapped with ``Resource.fetch``.
        """
        return Suspend(effect)

    @staticmethod
    def dispatch(message: Msg) -> Cmd[Msg]:
        """Feed ``message`` to update without running anything."""
        return Dispatch(message)

    @staticmethod
    def gtfo() -> Cmd[Any]:
        """Stop the driver loop."""
        return Gtfo()

    def and_then(self, then: Cmd[Msg]) -> Cmd[Msg]:
        """Run this command to exhaustion, then run ``then``.

        The stored order is ``AndThen(then=then, current=self)``: the receiver
        always executes first.
        """
        return AndThen(then=then, current=self)


@dataclass(frozen=True)
class Empty(Cmd[Msg]):
    """No effect."""


@dataclass(frozen=True)
class Suspend(Cmd[Msg]):
    """A one-shot deferred computation.

    Attributes:
        effect: Input-free callable producing a message. The driver loop
            invokes it at most once and then discards this value.
    """

    effect: Callable[[], Msg]


@dataclass(frozen=True)
class Dispatch(Cmd[Msg]):
    """A message to feed to update synchronously.

    Attributes:
        message: The message
    """

    message: Msg


@dataclass(frozen=True)
class AndThen(Cmd[Msg]):
    """Sequence of two commands.

    Attributes:
        then: Runs after ``current`` has drained to ``Empty``
        current: Runs first
    """

    then: Cmd[Msg]
    current: Cmd[Msg]


@dataclass(frozen=True)
class Gtfo(Cmd[Msg]):
    """Terminate the driver loop."""


none = Cmd.none
suspend = Cmd.suspend
dispatch = Cmd.dispatch
gtfo = Cmd.gtfo


def request_size(to_msg: Callable[[int, int], Msg]) -> Cmd[Msg]:
    """Ask for the terminal size as ``to_msg(width, height)``.

    Falls back to 80x24 when the output is not a terminal.
    """

    def _measure() -> Msg:
        size = shutil.get_terminal_size()
        return to_msg(size.columns, size.lines)

    return Cmd.suspend(_measure)
