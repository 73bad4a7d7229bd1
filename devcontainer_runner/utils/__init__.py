"""Utilities for devcontainer-runner."""

from .config_manager import ConfigManager, parse_devcontainer, parse_settings
from .path_finder import PathFinder

__all__ = [
    'ConfigManager',
    'PathFinder',
    'parse_devcontainer',
    'parse_settings',
]
