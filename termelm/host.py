"""Host boundary and the driver loop that interprets commands.

The driver loop owns the model, the current command and a stack of pending
continuations. Each iteration it renders, commits, and then takes exactly
one step on the current command:

    Suspend(effect)          run effect(), update with its message
    Dispatch(msg)            update with msg
    Gtfo()                   return
    AndThen(then, current)   push then, continue with current
    Empty()                  pop a continuation, or poll the host for an
                             event and update with from_event(event)

Everything runs on the calling thread. A suspended computation blocks
rendering and input until it returns.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Callable, Generic, Protocol, TypeVar

from .application import Application
from .cmd import AndThen, Cmd, Dispatch, Empty, Gtfo, Suspend
from .config import HostConfig, TimeoutPolicy
from .errors import (
    CommitError,
    EffectError,
    EventTimeout,
    PollError,
    RenderError,
)

logger = logging.getLogger(__name__)

Event = TypeVar("Event")
Event_co = TypeVar("Event_co", covariant=True)
Display = TypeVar("Display")
Msg = TypeVar("Msg")

__all__ = ["Host", "Tick", "run_automat"]


@dataclass(frozen=True)
class Tick:
    """Delivered to ``from_event`` when a poll times out under the tick policy.

    Attributes:
        timeout: The poll timeout that elapsed, in seconds
    """

    timeout: float


class Host(Protocol[Event_co, Display]):
    """The I/O boundary the driver loop talks to."""

    def poll_events(self, timeout: float) -> Event_co | None:
        """Wait up to ``timeout`` seconds for the next event.

        Returns None if nothing arrived in time.
        """
        ...

    def commit_screen_buffer(self, buffer: Display) -> None:
        """Flush rendered output to the terminal."""
        ...

    def get_screen_buffer(self) -> Display:
        """Return the display target handed to ``view``."""
        ...

    def raw_mode(self) -> AbstractContextManager[object]:
        """Enter raw mode; leaving the context must always restore it."""
        ...


@dataclass
class _Automat(Generic[Event, Display, Msg]):
    """State of one run of the driver loop."""

    host: Host[Event, Display]
    from_event: Callable[[Event | Tick], Msg]
    config: HostConfig
    iteration: int = 0

    def render(self, model: Application[Msg, Display], screen: Display) -> None:
        try:
            model.view(screen)
        except Exception as e:
            logger.exception("view failed on iteration %d", self.iteration)
            raise RenderError(str(e), self.iteration) from e

    def commit(self, screen: Display) -> None:
        try:
            self.host.commit_screen_buffer(screen)
        except Exception as e:
            logger.exception("commit failed on iteration %d", self.iteration)
            raise CommitError(str(e), self.iteration) from e

    def invoke(self, effect: Callable[[], Msg]) -> Msg:
        try:
            return effect()
        except Exception as e:
            logger.exception("suspended effect failed on iteration %d", self.iteration)
            raise EffectError(str(e), self.iteration) from e

    def next_message(self) -> Msg:
        """Block on the host until an event (or a tick) becomes a message."""
        timeout = self.config.poll_timeout
        while True:
            try:
                event = self.host.poll_events(timeout)
            except Exception as e:
                logger.exception("poll failed on iteration %d", self.iteration)
                raise PollError(str(e), self.iteration) from e

            if event is not None:
                return self.from_event(event)

            match self.config.timeout_policy:
                case TimeoutPolicy.WAIT:
                    logger.debug("poll timed out after %gs, waiting again", timeout)
                case TimeoutPolicy.TICK:
                    logger.debug("poll timed out after %gs, ticking", timeout)
                    return self.from_event(Tick(timeout))
                case TimeoutPolicy.FAIL:
                    logger.error("poll timed out after %gs", timeout)
                    raise EventTimeout(timeout, self.iteration)


def run_automat(
    host: Host[Event, Display],
    app: type[Application[Msg, Display]],
    from_event: Callable[[Event | Tick], Msg],
    config: HostConfig | None = None,
) -> None:
    """Run ``app`` against ``host`` until it issues ``Cmd.gtfo()``.

    Args:
        host: The I/O boundary
        app: Application class; ``app.init()`` is called once
        from_event: Converts host events (and ticks) into messages
        config: Loop settings; defaults to ``HostConfig()``

    Raises:
        RenderError: view raised
        CommitError: committing the display raised
        EffectError: a suspended computation raised
        PollError: polling the host raised
        EventTimeout: a poll timed out under the fail policy
        TypeError: update returned something that is not a command
    """
    automat: _Automat[Event, Display, Msg] = _Automat(
        host=host, from_event=from_event, config=config or HostConfig()
    )
    continuations: list[Cmd[Msg]] = []

    with host.raw_mode():
        model, cmd = app.init()
        screen = host.get_screen_buffer()
        logger.info("driver loop started for %s", app.__name__)

        while True:
            automat.iteration += 1
            automat.render(model, screen)
            automat.commit(screen)

            logger.debug("iteration %d: %s", automat.iteration, type(cmd).__name__)
            match cmd:
                case Suspend(effect=effect):
                    cmd = model.update(automat.invoke(effect))
                case Dispatch(message=message):
                    cmd = model.update(message)
                case Gtfo():
                    logger.info("driver loop finished after %d iterations", automat.iteration)
                    return
                case AndThen(then=then, current=current):
                    continuations.append(then)
                    cmd = current
                case Empty():
                    if continuations:
                        cmd = continuations.pop()
                        logger.debug("resuming continuation, %d left", len(continuations))
                    else:
                        cmd = model.update(automat.next_message())
                case _:
                    raise TypeError(f"update returned a non-command: {cmd!r}")
