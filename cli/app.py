"""Hello-world terminal application built on the termelm driver loop.

Screen layout:
    ~
    ~    Hello, alice [120x40]
    ~
     Ctrl+Q quit │ keys: a b Up │ ticks: 0          ← status bar

Message flow:
    init ──► request_size ──► Resized
                 └─► fetch(getuser) ──► NameLoaded ──► SetName
    key/resize/tick ──► ExternalEvent ──► (Ctrl+Q) gtfo
"""

from __future__ import annotations

import dataclasses
import getpass
import logging
import sys
from dataclasses import dataclass, field

from rich.text import Text

from termelm import (
    DEFAULT_CONFIG_PATH,
    AutomatError,
    Cmd,
    Failed,
    Present,
    Resource,
    Tick,
    TimeoutPolicy,
    assert_never,
    load_host_config,
    request_size,
    run_automat,
)

from .elements.base import InputEvent, ResizeEvent, TerminalEvent
from .elements.terminal import ANSI, Dimensions, Screen
from .host import TerminalHost

# Number of recent keys shown in the status bar
KEY_HISTORY = 8


@dataclass(frozen=True)
class SetName:
    name: str


@dataclass(frozen=True)
class NameLoaded:
    user: Resource[str]


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class ExternalEvent:
    event: TerminalEvent | Tick


Message = SetName | NameLoaded | Resized | ExternalEvent


def from_event(event: TerminalEvent | Tick) -> Message:
    """Every host event reaches the editor wrapped as ExternalEvent."""
    return ExternalEvent(event)


@dataclass
class Editor:
    """Model of the hello-world app.

    Attributes:
        name: Who to greet; replaced once the login name is fetched
        user: Outcome of looking up the login name
        size: Terminal size, None until the first measurement arrives
        keys: Most recent key chords, oldest first
        ticks: Poll timeouts seen (tick policy only)
    """

    name: str = "Unnamed"
    user: Resource[str] = field(default_factory=Resource.default)
    size: Dimensions | None = None
    keys: list[str] = field(default_factory=list)
    ticks: int = 0

    @classmethod
    def init(cls) -> tuple[Editor, Cmd[Message]]:
        return cls(), request_size(Resized).and_then(
            Resource.fetch(getpass.getuser, NameLoaded)
        )

    def update(self, message: Message) -> Cmd[Message]:
        match message:
            case SetName(name=name):
                self.name = name
                return Cmd.none()
            case NameLoaded(user=user):
                self.user = user
                match user:
                    case Present(value=login):
                        return Cmd.dispatch(SetName(login))
                    case _:
                        return Cmd.none()
            case Resized(width=width, height=height):
                self.size = Dimensions(width, height)
                return Cmd.none()
            case ExternalEvent(event=event):
                return self._handle_event(event)
            case _:
                assert_never(message)

    def _handle_event(self, event: TerminalEvent | Tick) -> Cmd[Message]:
        match event:
            case InputEvent(key="q", ctrl=True):
                return Cmd.gtfo()
            case InputEvent():
                self.keys = (self.keys + [event.describe()])[-KEY_HISTORY:]
                return Cmd.none()
            case ResizeEvent(width=width, height=height):
                return Cmd.dispatch(Resized(width, height))
            case Tick():
                self.ticks += 1
                return Cmd.none()
            case _:
                assert_never(event)

    def view(self, display: Screen) -> None:
        dim = self.size or display.dimensions()

        display.clear()
        for i in range(dim.height):
            display.queue("~")
            if i < dim.height - 1:
                display.queue("\r\n")

        greeting = f"Hello, {self.name} [{dim}]"
        display.move_to(5, min(10, dim.height - 1))
        display.queue(ANSI.truncate_to_width(greeting, max(dim.width - 5, 0)))

        display.move_to(0, dim.height - 1).print(self.status_bar(), width=dim.width)
        display.move_to(0, 0)

    def status_bar(self) -> Text:
        """Status bar line as a Rich Text."""
        text = Text(" Ctrl+Q quit", style="reverse")
        text.append(" │ keys: " + (" ".join(self.keys) or "-"), style="reverse")
        text.append(f" │ ticks: {self.ticks} ", style="reverse")
        if isinstance(self.user, Failed):
            text.append(f" {self.user.description} ", style="bold red")
        return text


def configure_logging(log_file: str | None) -> None:
    """Log to ``log_file`` if given; never to the terminal we draw on."""
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.getLogger().addHandler(logging.NullHandler())


def main() -> None:
    """Entry point for the hello-world application."""
    import argparse

    parser = argparse.ArgumentParser(description="termelm-hello")
    parser.add_argument(
        "--config",
        metavar="FILE",
        default=DEFAULT_CONFIG_PATH,
        help=f"Host config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--poll-timeout",
        type=float,
        metavar="SECONDS",
        help="Seconds to wait for input per poll (overrides config)",
    )
    parser.add_argument(
        "--timeout-policy",
        choices=[policy.value for policy in TimeoutPolicy],
        help="What to do when a poll times out (overrides config)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write debug logs to PATH",
    )
    args = parser.parse_args()

    configure_logging(args.log_file)

    config = load_host_config(args.config)
    try:
        if args.poll_timeout is not None:
            config = dataclasses.replace(config, poll_timeout=args.poll_timeout)
        if args.timeout_policy is not None:
            config = dataclasses.replace(
                config, timeout_policy=TimeoutPolicy(args.timeout_policy)
            )
    except ValueError as e:
        parser.error(str(e))

    host = TerminalHost.attach(sys.stdout, config)
    try:
        run_automat(host, Editor, from_event, config)
    except AutomatError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
