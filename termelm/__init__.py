"""termelm: a message-driven runtime for terminal programs

A model holds all state, ``update`` turns messages into state changes and
describes what to do next as a ``Cmd``, and ``view`` renders the model. The
driver loop (``run_automat``) is the only place effects are performed.
"""

from .application import Application, assert_never
from .cmd import (
    AndThen,
    Cmd,
    Dispatch,
    Empty,
    Gtfo,
    Suspend,
    dispatch,
    gtfo,
    none,
    request_size,
    suspend,
)
from .config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_POLL_TIMEOUT,
    HostConfig,
    TimeoutPolicy,
    load_host_config,
    save_host_config,
)
from .errors import (
    AutomatError,
    CommitError,
    EffectError,
    EventTimeout,
    PollError,
    RenderError,
)
from .host import Host, Tick, run_automat
from .resource import Failed, Present, Resource, Unknown, fetch

__all__ = [
    # Commands
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
    # Resources
    "Resource",
    "Unknown",
    "Present",
    "Failed",
    "fetch",
    # Contract and driver loop
    "Application",
    "assert_never",
    "Host",
    "Tick",
    "run_automat",
    # Configuration
    "HostConfig",
    "TimeoutPolicy",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_POLL_TIMEOUT",
    "load_host_config",
    "save_host_config",
    # Errors
    "AutomatError",
    "RenderError",
    "CommitError",
    "EffectError",
    "PollError",
    "EventTimeout",
]

__version__ = "0.1.0"
