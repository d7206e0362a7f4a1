"""Configuration loading/saving for the driver loop."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.termelm.json")

# How long a single poll waits for the world before giving up
DEFAULT_POLL_TIMEOUT = 5.427


class TimeoutPolicy(Enum):
    """What the driver loop does when a poll returns no event."""

    WAIT = "wait"  # Poll again; nothing is rendered or updated
    TICK = "tick"  # Deliver a Tick event to the application
    FAIL = "fail"  # Abort the loop with EventTimeout


@dataclass
class HostConfig:
    """Driver loop and terminal settings.

    Attributes:
        poll_timeout: Seconds to wait for an input event per poll
        timeout_policy: Behaviour when a poll times out
        alternate_screen: Draw on the terminal's alternate screen
        hide_cursor: Hide the hardware cursor while running
    """

    poll_timeout: float = DEFAULT_POLL_TIMEOUT
    timeout_policy: TimeoutPolicy = TimeoutPolicy.WAIT
    alternate_screen: bool = True
    hide_cursor: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.timeout_policy, str):
            self.timeout_policy = TimeoutPolicy(self.timeout_policy)
        if self.poll_timeout <= 0:
            raise ValueError(f"poll_timeout must be positive, got {self.poll_timeout}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HostConfig:
        """Build a config from a JSON object, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["timeout_policy"] = self.timeout_policy.value
        return data


def load_host_config(path: str = DEFAULT_CONFIG_PATH) -> HostConfig:
    """Load config from disk. Returns defaults if not found or invalid."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return HostConfig()
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return HostConfig()

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a JSON object", path)
        return HostConfig()
    try:
        return HostConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning("Ignoring invalid config %s: %s", path, e)
        return HostConfig()


def save_host_config(config: HostConfig, path: str = DEFAULT_CONFIG_PATH) -> None:
    """Persist config to disk."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
