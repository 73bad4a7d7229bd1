"""Project loading."""

import logging
from pathlib import Path
from typing import Optional

from ..models.context import RunContext
from ..models.devcontainer import DevContainer
from ..models.settings import Settings
from ..services.exceptions import NoDevContainerError
from ..utils.config_manager import ConfigManager
from ..utils.path_finder import PathFinder

logger = logging.getLogger(__name__)


class Project:
    """A project directory with its descriptor and the user settings."""

    def __init__(
        self,
        path: Optional[Path] = None,
        filename: Optional[str] = None,
        no_user_settings: bool = False,
        settings_path: Optional[Path] = None,
    ):
        """Resolve the project root.

        Args:
            path: Directory to start the search from (default: cwd)
            filename: Descriptor file name inside `.devcontainer`
            no_user_settings: Ignore the user settings file
            settings_path: Override the user settings location
        """
        self.root = PathFinder.find_project_root(path)
        self.no_user_settings = no_user_settings
        self.config_manager = ConfigManager(self.root, filename, settings_path)
        self._devcontainer: Optional[DevContainer] = None
        self.settings = Settings()

    @property
    def devcontainer_dir(self) -> Path:
        return self.config_manager.devcontainer_dir

    @property
    def devcontainer(self) -> DevContainer:
        """The loaded descriptor.

        Raises:
            NoDevContainerError: If `load()` has not succeeded
        """
        if self._devcontainer is None:
            raise NoDevContainerError()
        return self._devcontainer

    @property
    def is_loaded(self) -> bool:
        return self._devcontainer is not None

    def load(self) -> "Project":
        """Load the descriptor and, unless disabled, the user settings."""
        self._devcontainer = self.config_manager.load_devcontainer()

        if self.no_user_settings:
            logger.warning("User settings are disabled")
            self.settings = Settings()
        else:
            self.settings = self.config_manager.load_settings()

        return self

    @property
    def name(self) -> str:
        return self.devcontainer.get_name(self.root)

    def create_context(self) -> RunContext:
        """Fresh run state for one command."""
        return RunContext(project_name=self.name)
