"""Tests for configuration management"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from sniplias.config import Config, default_config_dir, default_data_dir


@pytest.fixture
def config_dir(tmp_path):
    return tmp_path / "sniplias"


@pytest.fixture(autouse=True)
def clean_env():
    with patch.dict("os.environ", {}, clear=False) as environ:
        environ.pop("SNIPLIAS_SNIPPETS_FILE", None)
        environ.pop("SNIPLIAS_SHELL_CONFIG", None)
        yield


def test_defaults_without_file(config_dir):
    config = Config(config_dir)
    assert config.config == Config.DEFAULT_CONFIG


def test_user_values_merge_over_defaults(config_dir):
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"theme": "ocean"}))

    config = Config(config_dir)

    assert config.get("theme") == "ocean"
    assert config.get("default_tab") == "snippets"
    assert config.get_theme() == Config.THEMES["ocean"]


def test_corrupt_file_falls_back_to_defaults(config_dir):
    config_dir.mkdir()
    (config_dir / "config.json").write_text("{oops")
    assert Config(config_dir).config == Config.DEFAULT_CONFIG


def test_unknown_theme_uses_default(config_dir):
    config = Config(config_dir)
    config.config["theme"] = "neon"
    assert config.get_theme() == Config.THEMES["default"]


def test_set_persists(config_dir):
    config = Config(config_dir)
    config.set("default_tab", "aliases")

    assert Config(config_dir).get("default_tab") == "aliases"


def test_env_overrides_file(config_dir):
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"snippets_file": "/from/file.json"}))

    with patch.dict("os.environ", {"SNIPLIAS_SNIPPETS_FILE": "/from/env.json"}):
        config = Config(config_dir)

    assert config.get_path("snippets_file") == Path("/from/env.json")


def test_get_path_expands_user(config_dir):
    config = Config(config_dir)
    config.config["shell_config_file"] = "~/.zshrc"
    assert config.get_path("shell_config_file") == Path.home() / ".zshrc"
    assert config.get_path("snippets_file") is None


def test_platform_dirs(tmp_path):
    with patch("sniplias.config.platformdirs.user_data_dir", return_value=str(tmp_path / "data")) as data_dir, \
            patch("sniplias.config.platformdirs.user_config_dir", return_value=str(tmp_path / "config")) as config_dir:
        assert default_data_dir() == tmp_path / "data"
        assert default_config_dir() == tmp_path / "config"

    data_dir.assert_called_once_with("sniplias", appauthor=False)
    config_dir.assert_called_once_with("sniplias", appauthor=False)


def test_config_defaults_to_platform_config_dir(tmp_path):
    with patch("sniplias.config.platformdirs.user_config_dir", return_value=str(tmp_path)):
        config = Config()
    assert config.config_path == tmp_path / "config.json"


def test_set_does_not_persist_env_overrides(config_dir):
    config_dir.mkdir()
    (config_dir / "config.json").write_text(json.dumps({"snippets_file": "/from/file.json"}))

    with patch.dict("os.environ", {"SNIPLIAS_SNIPPETS_FILE": "/from/env.json"}):
        config = Config(config_dir)
        config.set("theme", "ocean")

    stored = json.loads((config_dir / "config.json").read_text())
    assert stored["snippets_file"] == "/from/file.json"
    assert stored["theme"] == "ocean"
