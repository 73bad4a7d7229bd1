"""Tests for path_finder.py module."""

from pathlib import Path

import pytest

from devcontainer_runner.services.exceptions import InvalidConfigError
from devcontainer_runner.utils.path_finder import PathFinder


class TestPathFinder:
    """Test suite for PathFinder class."""

    def test_find_project_root_at_start(self, temp_project_dir):
        """The start directory is the root when it holds .devcontainer."""
        assert PathFinder.find_project_root(temp_project_dir) == temp_project_dir.resolve()

    def test_find_project_root_from_subdirectory(self, temp_project_dir):
        """Walks up to the ancestor holding .devcontainer."""
        nested = temp_project_dir / "src" / "pkg"
        nested.mkdir()

        assert PathFinder.find_project_root(nested) == temp_project_dir.resolve()

    def test_find_project_root_prefers_nearest(self, temp_project_dir):
        """The nearest ancestor wins over outer ones."""
        inner = temp_project_dir / "src" / "inner"
        (inner / ".devcontainer").mkdir(parents=True)
        deeper = inner / "lib"
        deeper.mkdir()

        assert PathFinder.find_project_root(deeper) == inner.resolve()

    def test_find_project_root_without_devcontainer(self, tmp_path):
        """Falls back to the start directory."""
        start = tmp_path / "plain"
        start.mkdir()

        assert PathFinder.find_project_root(start) == start.resolve()

    def test_find_project_root_missing_path(self, tmp_path):
        """A path that does not exist is rejected."""
        with pytest.raises(InvalidConfigError, match="Project path does not exist"):
            PathFinder.find_project_root(tmp_path / "missing")

    def test_find_project_root_defaults_to_cwd(self, temp_project_dir, monkeypatch):
        """Without a start path the current directory is used."""
        monkeypatch.chdir(temp_project_dir / "src")
        assert PathFinder.find_project_root() == temp_project_dir.resolve()

    def test_user_config_dir_from_xdg(self, monkeypatch, tmp_path):
        """XDG_CONFIG_HOME is honoured."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert PathFinder.user_config_dir() == tmp_path

    def test_user_config_dir_default(self, monkeypatch, tmp_path):
        """Defaults to ~/.config."""
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert PathFinder.user_config_dir() == Path(tmp_path) / ".config"

    def test_settings_path(self, monkeypatch, tmp_path):
        """Settings live in devcontainer.json under the config dir."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert PathFinder.settings_path() == tmp_path / "devcontainer.json"
