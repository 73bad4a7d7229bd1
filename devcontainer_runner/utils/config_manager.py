"""Configuration loading utilities."""

import logging
from pathlib import Path
from typing import Any, Optional

import json5
from pydantic import ValidationError

from ..core.constants import DEFAULT_DESCRIPTOR_NAME, DEVCONTAINER_DIR_NAME
from ..models.devcontainer import DevContainer
from ..models.settings import Settings
from ..services.exceptions import (
    ConfigDoesNotExistError,
    InvalidConfigError,
    InvalidSettingsError,
)
from .path_finder import PathFinder

logger = logging.getLogger(__name__)


def _format_validation_error(error: ValidationError) -> str:
    messages = []
    for item in error.errors():
        location = '.'.join(str(part) for part in item['loc'])
        message = item['msg'].removeprefix('Value error, ')
        messages.append(f"{location}: {message}" if location else message)
    return '; '.join(messages)


def parse_devcontainer(data: Any) -> DevContainer:
    """Validate raw descriptor data.

    Raises:
        InvalidConfigError: If the data is not a valid descriptor
    """
    if not isinstance(data, dict):
        raise InvalidConfigError("devcontainer.json must contain an object")
    try:
        return DevContainer.model_validate(data)
    except ValidationError as e:
        raise InvalidConfigError(_format_validation_error(e)) from e


def parse_settings(data: Any) -> Settings:
    """Validate raw user settings data.

    Raises:
        InvalidSettingsError: If the data is not valid settings
    """
    if not isinstance(data, dict):
        raise InvalidSettingsError("settings must contain an object")
    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise InvalidSettingsError(_format_validation_error(e)) from e


class ConfigManager:
    """Loads the project descriptor and the user settings."""

    def __init__(
        self,
        project_root: Path,
        filename: Optional[str] = None,
        settings_path: Optional[Path] = None,
    ):
        """Initialize config manager."""
        self.project_root = project_root
        self.devcontainer_dir = project_root / DEVCONTAINER_DIR_NAME
        self.descriptor_file = self.devcontainer_dir / (filename or DEFAULT_DESCRIPTOR_NAME)
        self.settings_file = settings_path or PathFinder.settings_path()

    def load_devcontainer(self) -> DevContainer:
        """Load and validate the project descriptor.

        Raises:
            ConfigDoesNotExistError: If the descriptor file is missing
            InvalidConfigError: If it cannot be parsed or validated
        """
        logger.info(f"Loading project: {self.project_root}")
        logger.info(f"devcontainer.json: {self.descriptor_file}")

        if not self.descriptor_file.exists():
            raise ConfigDoesNotExistError(str(self.descriptor_file))

        try:
            data = json5.loads(self.descriptor_file.read_text())
        except (OSError, ValueError) as e:
            raise InvalidConfigError(str(e)) from e

        return parse_devcontainer(data)

    def load_settings(self) -> Settings:
        """Load the user settings, or empty defaults when there is no file.

        Raises:
            InvalidSettingsError: If the file exists but is not valid
        """
        if not self.settings_file.exists():
            logger.debug(f"No user settings at {self.settings_file}")
            return Settings()

        logger.info(f"Loading user settings: {self.settings_file}")
        try:
            data = json5.loads(self.settings_file.read_text())
        except (OSError, ValueError) as e:
            raise InvalidSettingsError(str(e)) from e

        return parse_settings(data)
