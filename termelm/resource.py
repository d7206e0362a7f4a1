"""Tri-state result of a fetched value.

A ``Resource`` starts out ``Unknown`` in the application's model and is
replaced wholesale once the computation behind it resolves:

    Unknown ──fetch──► Present(value)
                  └──► Failed(description)

``Resource.fetch`` turns a fallible computation into a command whose
failure arrives as an ordinary message, so the driver loop never sees it.

Example:
    >>> @dataclass
    ... class Loaded:
    ...     config: Resource[dict[str, str]]
    >>>
    >>> Resource.fetch(read_config, Loaded)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from .cmd import Cmd

A = TypeVar("A")
Msg = TypeVar("Msg")

__all__ = ["Resource", "Unknown", "Present", "Failed", "fetch"]


class Resource(Generic[A]):
    """Base of the resource variants."""

    __slots__ = ()

    @staticmethod
    def default() -> Resource[Any]:
        """The initial state: nothing attempted yet."""
        return Unknown()

    @staticmethod
    def fetch(
        effect: Callable[[], A], as_message: Callable[[Resource[A]], Msg]
    ) -> Cmd[Msg]:
        """Wrap ``effect`` so that it always yields a message.

        Args:
            effect: Input-free computation that returns a value or raises
            as_message: Turns the resulting resource into a message

        Returns:
            A suspended command producing ``as_message(Present(value))`` on
            success and ``as_message(Failed(str(error)))`` on failure.
        """

        def _run() -> Msg:
            try:
                value = effect()
            except Exception as e:
                return as_message(Failed(str(e)))
            return as_message(Present(value))

        return Cmd.suspend(_run)

    def present(self) -> A | None:
        """Return the held value if present, otherwise None."""
        return None

    def is_unknown(self) -> bool:
        return False

    def is_present(self) -> bool:
        return False

    def is_failed(self) -> bool:
        return False


@dataclass(frozen=True)
class Unknown(Resource[A]):
    """No attempt has been made yet."""

    def is_unknown(self) -> bool:
        return True


@dataclass(frozen=True)
class Present(Resource[A]):
    """The computation succeeded.

    Attributes:
        value: What the computation returned
    """

    value: A

    def present(self) -> A | None:
        return self.value

    def is_present(self) -> bool:
        return True


@dataclass(frozen=True)
class Failed(Resource[A]):
    """The computation raised.

    Attributes:
        description: ``str()`` of the raised exception
    """

    description: str

    def is_failed(self) -> bool:
        return True


fetch = Resource.fetch
