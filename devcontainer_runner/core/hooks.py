"""Lifecycle hook execution."""

import logging
from enum import Enum
from typing import Optional

from ..models.devcontainer import CommandSpec, DevContainer
from ..models.settings import Settings
from ..services.docker_service import DockerService
from ..services.exceptions import ExecCommandError

logger = logging.getLogger(__name__)


class CommandHook(Enum):
    """Lifecycle points at which commands run inside the container."""
    POST_CREATE = "post_create_command"
    POST_START = "post_start_command"
    POST_ATTACH = "post_attach_command"


class HookRunner:
    """Runs descriptor hooks, then user hooks, inside the container."""

    def __init__(self, docker_service: DockerService, devcontainer: DevContainer, settings: Settings):
        self.docker_service = docker_service
        self.devcontainer = devcontainer
        self.settings = settings

    async def _exec(self, container_id: str, command: CommandSpec) -> None:
        exit_code = await self.docker_service.exec_command(container_id, command.to_shell_args())
        if exit_code:
            raise ExecCommandError(f"Exit code: {exit_code}", exit_code=exit_code)

    async def run(self, hook: CommandHook, container_id: str) -> None:
        """Run the descriptor command for `hook`, then the user one.

        Raises:
            ExecCommandError: If either command exits with a non-zero code
        """
        command: Optional[CommandSpec] = getattr(self.devcontainer, hook.value)
        if command is not None:
            logger.info(f"Executing hook: {hook.name}")
            await self._exec(container_id, command)

        user_command: Optional[CommandSpec] = getattr(self.settings, hook.value)
        if user_command is not None:
            logger.info(f"Executing user hook: {hook.name}")
            await self._exec(container_id, user_command)
