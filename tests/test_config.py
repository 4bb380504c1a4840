"""Tests for the persisted configuration."""

import json

import pytest

from securedev.config import Config, config_path, load_config, save_config


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "securedev.json"
    monkeypatch.setenv("SECUREDEV_CONFIG", str(path))
    return path


class TestConfig:
    def test_defaults(self):
        config = Config()
        assert config.workspace_root is None
        assert config.block_on_severity == "CRITICAL"
        assert config.exclude_projects == []

    def test_env_override(self, config_file):
        assert config_path() == config_file

    def test_missing_file_gives_defaults(self, config_file):
        assert load_config() == Config()

    def test_round_trip(self, config_file):
        save_config(Config(workspace_root="/work", block_on_severity="HIGH", exclude_projects=["scratch"]))
        assert json.loads(config_file.read_text())["block_on_severity"] == "HIGH"
        loaded = load_config()
        assert loaded.workspace_root == "/work"
        assert loaded.exclude_projects == ["scratch"]

    def test_partial_file(self, config_file):
        config_file.write_text('{"workspace_root": "/work"}')
        config = load_config()
        assert config.workspace_root == "/work"
        assert config.block_on_severity == "CRITICAL"

    @pytest.mark.parametrize("content", ["{broken", '{"block_on_severity": "LOW"}', "[]"])
    def test_invalid_file_gives_defaults(self, config_file, content, caplog):
        config_file.write_text(content)
        assert load_config() == Config()
        assert "Ignoring unreadable config" in caplog.text
