"""Tests for the tri-state Resource wrapper in termelm/resource.py."""

from __future__ import annotations

import pytest

from termelm import Failed, Present, Resource, Suspend, Unknown, fetch


class TestResourceStates:
    """Tests for accessors and predicates."""

    def test_default_is_unknown(self) -> None:
        resource: Resource[int] = Resource.default()
        assert resource == Unknown()
        assert resource.is_unknown()
        assert resource.present() is None

    def test_present_returns_value(self) -> None:
        resource = Present([1, 2, 3])
        assert resource.present() == [1, 2, 3]
        assert resource.is_present()
        assert not resource.is_failed()

    def test_failed_has_no_value(self) -> None:
        resource: Resource[int] = Failed("nope")
        assert resource.present() is None
        assert resource.is_failed()
        assert not resource.is_unknown()

    def test_present_none_is_still_present(self) -> None:
        """present() can't tell Present(None) apart, the predicate can."""
        resource = Present(None)
        assert resource.present() is None
        assert resource.is_present()


class TestFetch:
    """Tests for Resource.fetch()."""

    def test_fetch_builds_suspend_without_running(self) -> None:
        calls: list[int] = []

        def effect() -> int:
            calls.append(1)
            return 1

        cmd = Resource.fetch(effect, lambda r: r)

        assert isinstance(cmd, Suspend)
        assert calls == []

    def test_success_wraps_value(self) -> None:
        cmd = fetch(lambda: "v", lambda r: ("msg", r))

        assert isinstance(cmd, Suspend)
        assert cmd.effect() == ("msg", Present("v"))

    def test_failure_becomes_message(self) -> None:
        def effect() -> str:
            raise FileNotFoundError("settings.json")

        cmd = fetch(effect, lambda r: ("msg", r))

        assert isinstance(cmd, Suspend)
        assert cmd.effect() == ("msg", Failed("settings.json"))

    def test_failure_description_is_str_of_error(self) -> None:
        error = ValueError("bad value", 3)

        def effect() -> str:
            raise error

        cmd = fetch(effect, lambda r: r)

        assert isinstance(cmd, Suspend)
        assert cmd.effect() == Failed(str(error))

    def test_keyboard_interrupt_is_not_captured(self) -> None:
        def effect() -> str:
            raise KeyboardInterrupt

        cmd = fetch(effect, lambda r: r)

        assert isinstance(cmd, Suspend)
        with pytest.raises(KeyboardInterrupt):
            cmd.effect()
