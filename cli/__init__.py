"""termelm terminal front end.

A hello-world app running on the termelm driver loop against a real
terminal:
- TerminalHost: raw-mode guard, buffered screen commit, bounded-wait polling
- Editor: the example application (greeting, key history, Ctrl+Q to quit)

Usage:
    termelm-hello [--config FILE] [--poll-timeout SECONDS]
                  [--timeout-policy wait|tick|fail] [--log-file PATH]

Features:
    - Alternate screen with hidden cursor while running
    - Resize detection while waiting for input (SIGWINCH)
    - Bracketed paste decoded as a single Paste key
    - Terminal restored on every exit path, including errors
"""

from .app import Editor, Message, from_event, main
from .host import TerminalHost

__all__ = [
    # Main app
    "Editor",
    "Message",
    "from_event",
    "main",
    # Host
    "TerminalHost",
]
