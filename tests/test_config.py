"""Tests for host configuration in termelm/config.py."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from termelm.config import (
    DEFAULT_POLL_TIMEOUT,
    HostConfig,
    TimeoutPolicy,
    load_host_config,
    save_host_config,
)


class TestHostConfig:
    """Tests for the HostConfig dataclass."""

    def test_defaults(self) -> None:
        config = HostConfig()
        assert config.poll_timeout == DEFAULT_POLL_TIMEOUT
        assert config.timeout_policy is TimeoutPolicy.WAIT
        assert config.alternate_screen
        assert config.hide_cursor

    def test_policy_string_is_converted(self) -> None:
        assert HostConfig(timeout_policy="tick").timeout_policy is TimeoutPolicy.TICK  # type: ignore[arg-type]

    def test_unknown_policy_rejected(self) -> None:
        with pytest.raises(ValueError):
            HostConfig(timeout_policy="sometimes")  # type: ignore[arg-type]

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValueError):
            HostConfig(poll_timeout=0)

    def test_from_dict_ignores_unknown_keys(self) -> None:
        config = HostConfig.from_dict({"poll_timeout": 1.5, "color_scheme": "dark"})
        assert config.poll_timeout == 1.5

    def test_to_dict_is_json_friendly(self) -> None:
        data = HostConfig(timeout_policy=TimeoutPolicy.FAIL).to_dict()
        assert data["timeout_policy"] == "fail"
        json.dumps(data)


class TestLoadHostConfig:
    """Tests for load_host_config() / save_host_config()."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_host_config(str(tmp_path / "absent.json")) == HostConfig()

    def test_malformed_json_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_host_config(str(path)) == HostConfig()

    def test_non_object_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_host_config(str(path)) == HostConfig()

    def test_invalid_values_give_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"poll_timeout": -1}), encoding="utf-8")
        assert load_host_config(str(path)) == HostConfig()

    def test_saved_config_loads_back(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.json"
        config = HostConfig(poll_timeout=0.75, timeout_policy=TimeoutPolicy.TICK, hide_cursor=False)

        save_host_config(config, str(path))

        assert load_host_config(str(path)) == config
