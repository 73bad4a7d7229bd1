"""Utilities for finding project and configuration paths."""

import os
from pathlib import Path
from typing import Optional

from ..core.constants import DEVCONTAINER_DIR_NAME, SETTINGS_FILE_NAME
from ..services.exceptions import InvalidConfigError


class PathFinder:
    """Utility class for locating projects and user configuration."""

    @staticmethod
    def find_project_root(start: Optional[Path] = None) -> Path:
        """Find the directory holding the `.devcontainer` folder.

        Walks up from `start` (default: cwd) and returns the nearest ancestor
        with a `.devcontainer` folder, or `start` itself when none has one.
        """
        start = Path.cwd() if start is None else Path(start)
        try:
            start = start.resolve(strict=True)
        except (FileNotFoundError, RuntimeError) as e:
            raise InvalidConfigError(f"Project path does not exist: {start}") from e

        for candidate in (start, *start.parents):
            if (candidate / DEVCONTAINER_DIR_NAME).is_dir():
                return candidate
        return start

    @staticmethod
    def user_config_dir() -> Path:
        """Per-user configuration directory ($XDG_CONFIG_HOME or ~/.config)."""
        xdg = os.environ.get('XDG_CONFIG_HOME')
        if xdg:
            return Path(xdg)
        return Path.home() / '.config'

    @classmethod
    def settings_path(cls) -> Path:
        """Location of the user settings file."""
        return cls.user_config_dir() / SETTINGS_FILE_NAME
