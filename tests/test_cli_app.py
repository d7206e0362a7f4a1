"""Tests for the hello-world application in cli/app.py."""

from __future__ import annotations

import io
import os
from collections import deque

import pytest

from cli.app import (
    KEY_HISTORY,
    Editor,
    ExternalEvent,
    NameLoaded,
    Resized,
    SetName,
    from_event,
)
from cli.elements.base import InputEvent, ResizeEvent
from cli.elements.terminal import Dimensions, Screen
from cli.host import TerminalHost
from termelm import (
    AndThen,
    Dispatch,
    Empty,
    Failed,
    Gtfo,
    HostConfig,
    Present,
    Suspend,
    Tick,
    TimeoutPolicy,
    run_automat,
)


class _FakeReader:
    def __init__(self, events: list[InputEvent | None]) -> None:
        self.events: deque[InputEvent | None] = deque(events)
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def watch_resize(self) -> None:
        pass

    def unwatch_resize(self) -> None:
        pass

    def read_nonblocking(self, timeout: float = 0.0) -> InputEvent | None:
        return self.events.popleft() if self.events else None


CTRL_Q = InputEvent(key="q", char="q", ctrl=True)


class TestEditorUpdate:
    """Tests for Editor.update()."""

    def test_init_requests_size_then_fetches_user(self) -> None:
        editor, cmd = Editor.init()

        assert editor.name == "Unnamed"
        assert editor.user.is_unknown()
        assert isinstance(cmd, AndThen)
        assert isinstance(cmd.current, Suspend)
        assert isinstance(cmd.then, Suspend)

    def test_set_name(self) -> None:
        editor = Editor()
        assert editor.update(SetName("bob")) == Empty()
        assert editor.name == "bob"

    def test_loaded_user_dispatches_set_name(self) -> None:
        editor = Editor()
        cmd = editor.update(NameLoaded(Present("alice")))
        assert cmd == Dispatch(SetName("alice"))
        assert editor.user == Present("alice")

    def test_failed_user_keeps_name(self) -> None:
        editor = Editor()
        cmd = editor.update(NameLoaded(Failed("no login name")))
        assert cmd == Empty()
        assert editor.name == "Unnamed"
        assert "no login name" in editor.status_bar().plain

    def test_resized(self) -> None:
        editor = Editor()
        editor.update(Resized(120, 40))
        assert editor.size == Dimensions(120, 40)

    def test_ctrl_q_quits(self) -> None:
        assert Editor().update(from_event(CTRL_Q)) == Gtfo()

    def test_plain_q_is_just_a_key(self) -> None:
        editor = Editor()
        assert editor.update(from_event(InputEvent(key="q", char="q"))) == Empty()
        assert editor.keys == ["q"]

    def test_key_history_is_bounded(self) -> None:
        editor = Editor()
        for i in range(KEY_HISTORY + 3):
            editor.update(ExternalEvent(InputEvent(key=str(i), char=str(i))))
        assert len(editor.keys) == KEY_HISTORY
        assert editor.keys[-1] == str(KEY_HISTORY + 2)

    def test_resize_event_becomes_resized(self) -> None:
        assert Editor().update(from_event(ResizeEvent(90, 30))) == Dispatch(Resized(90, 30))

    def test_tick_counts(self) -> None:
        editor = Editor()
        editor.update(from_event(Tick(1.0)))
        editor.update(from_event(Tick(1.0)))
        assert editor.ticks == 2


class TestEditorView:
    """Tests for Editor.view()."""

    def test_greeting_and_tildes(self) -> None:
        screen = Screen(io.StringIO(), size=(40, 12))
        editor = Editor(name="alice")

        editor.view(screen)

        frame = screen.pending()
        assert "Hello, alice [40x12]" in frame
        assert frame.count("~") == 12

    def test_known_size_wins_over_screen(self) -> None:
        screen = Screen(io.StringIO(), size=(40, 12))
        editor = Editor(size=Dimensions(30, 8))

        editor.view(screen)

        assert "[30x8]" in screen.pending()

    def test_view_does_not_mutate_model(self) -> None:
        editor = Editor(name="alice", keys=["a"])
        before = (editor.name, list(editor.keys), editor.ticks, editor.size)

        editor.view(Screen(io.StringIO(), size=(40, 12)))

        assert (editor.name, editor.keys, editor.ticks, editor.size) == before


class TestEditorRun:
    """End-to-end run against TerminalHost with a fake reader."""

    def test_full_session(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "termelm.cmd.shutil.get_terminal_size", lambda: os.terminal_size((40, 12))
        )
        monkeypatch.setattr("cli.app.getpass.getuser", lambda: "alice")
        out = io.StringIO()
        reader = _FakeReader([InputEvent(key="a", char="a"), None, CTRL_Q])
        config = HostConfig(poll_timeout=0.01, timeout_policy=TimeoutPolicy.TICK)
        host = TerminalHost(
            screen=Screen(out, size=(40, 12)),
            reader=reader,  # type: ignore[arg-type]
            config=config,
        )

        run_automat(host, Editor, from_event, config)

        output = out.getvalue()
        assert "Hello, alice [40x12]" in output
        assert "keys: a" in output
        assert "ticks: 1" in output
        assert reader.started and reader.stopped

    def test_failed_login_lookup_is_shown(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def no_user() -> str:
            raise OSError("No username set in the environment")

        monkeypatch.setattr(
            "termelm.cmd.shutil.get_terminal_size", lambda: os.terminal_size((80, 12))
        )
        monkeypatch.setattr("cli.app.getpass.getuser", no_user)
        out = io.StringIO()
        reader = _FakeReader([CTRL_Q])
        host = TerminalHost(screen=Screen(out, size=(80, 12)), reader=reader)  # type: ignore[arg-type]

        run_automat(host, Editor, from_event, host.config)

        output = out.getvalue()
        assert "Hello, Unnamed" in output
        assert "No username set" in output
