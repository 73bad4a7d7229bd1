"""CLI Helper Functions for devcontainer-runner.

This module provides the pieces every command shares:
- Logging setup with a Rich handler
- Project loading and Docker connection from the global options
- Running an orchestrator action and turning errors into exit codes
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

from rich.console import Console
from rich.logging import RichHandler

from devcontainer_runner.core.orchestrator import Orchestrator
from devcontainer_runner.core.project import Project
from devcontainer_runner.services.docker_service import DockerService
from devcontainer_runner.services.exceptions import DevContainerError

error_console = Console(stderr=True)


def setup_logging(level: str) -> None:
    """Configure Rich logging on the root logger (called once per process)."""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            root_logger.setLevel(level.upper())
            return

    root_logger.setLevel(level.upper())
    root_logger.addHandler(RichHandler(console=error_console, show_path=False, markup=False))

    # Keep the HTTP client chatter out of debug output
    for lib in ["urllib3", "requests", "docker"]:
        logging.getLogger(lib).setLevel(logging.WARNING)


def load_project(options: dict) -> Project:
    """Resolve and load the project named by the global options.

    Raises:
        DevContainerError: If the project cannot be loaded
    """
    path: Optional[str] = options.get('path')
    project = Project(
        Path(path) if path else None,
        filename=options.get('file'),
        no_user_settings=options.get('no_user_settings', False),
    )
    return project.load()


def run_orchestrator(options: dict, action: Callable[[Orchestrator], Awaitable[None]]) -> None:
    """Load the project, connect to Docker and run `action` to completion.

    Any DevContainerError is printed to stderr and exits with status 1.
    """
    try:
        project = load_project(options)
        docker_service = DockerService(options.get('host'))
        try:
            orchestrator = Orchestrator(
                project,
                docker_service,
                compose_bin=options['compose_bin'],
                docker_host=options.get('host'),
            )
            asyncio.run(action(orchestrator))
        finally:
            docker_service.close()
    except DevContainerError as e:
        error_console.print(str(e), style="red", markup=False, highlight=False, soft_wrap=True)
        sys.exit(1)
