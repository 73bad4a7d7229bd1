"""Compose provisioning strategy and compose stop."""

import logging
import shlex
from pathlib import Path
from typing import Dict, List, Optional

from ..models.context import RunContext
from ..models.devcontainer import DevContainer
from ..models.settings import Settings
from ..services.docker_service import DockerService
from ..services.exceptions import ComposeError, ContainerCreateError
from ..services.process_service import ProcessService
from .compose_override import generate_compose_override, read_compose_version
from .constants import COMPOSE_PROJECT_LABEL, COMPOSE_SERVICE_LABEL, DEFAULT_COMPOSE_BIN
from .container_config import devcontainer_envs
from .hooks import CommandHook, HookRunner
from .provisioner import Provisioner

logger = logging.getLogger(__name__)


def compose_labels(project_name: str, service: str) -> Dict[str, str]:
    """Labels compose puts on the container of a service."""
    return {COMPOSE_PROJECT_LABEL: project_name, COMPOSE_SERVICE_LABEL: service}


class ComposeRunner:
    """Builds and runs compose command lines for a project."""

    def __init__(
        self,
        process_service: ProcessService,
        devcontainer: DevContainer,
        settings: Settings,
        devcontainer_dir: Path,
        compose_bin: str = DEFAULT_COMPOSE_BIN,
        docker_host: Optional[str] = None,
    ):
        self.process_service = process_service
        self.devcontainer = devcontainer
        self.settings = settings
        self.devcontainer_dir = devcontainer_dir
        self.compose_bin = compose_bin
        self.docker_host = docker_host

    def _first_compose_file(self) -> Path:
        first = Path(self.devcontainer.docker_compose_file.to_files()[0])
        if first.is_absolute():
            return first
        return self.devcontainer_dir / first

    def _write_override(self, ctx: RunContext) -> Path:
        version = read_compose_version(self._first_compose_file())
        extra_ports = [ctx.application_port] if ctx.application_port is not None else []
        return generate_compose_override(
            self.settings,
            self.devcontainer.service,
            version,
            envs=devcontainer_envs(ctx),
            extra_ports=extra_ports,
        )

    def build_args(self, ctx: RunContext, extra: List[str]) -> List[str]:
        """Full compose argument vector, override file included.

        Raises:
            ComposeError: If the override cannot be generated
        """
        args = shlex.split(self.compose_bin)
        args.extend(['-p', ctx.project_name])
        for compose_file in self.devcontainer.docker_compose_file.to_files():
            args.extend(['-f', compose_file])
        args.extend(['-f', str(self._write_override(ctx))])
        args.extend(extra)
        return args

    async def run(self, ctx: RunContext, extra: List[str]) -> None:
        """Run compose in the `.devcontainer` folder.

        Raises:
            ComposeError: If compose cannot be started or exits non-zero
        """
        args = self.build_args(ctx, extra)
        env = {'DOCKER_HOST': self.docker_host} if self.docker_host else None

        logger.info("Running docker-compose")
        logger.debug(f"Compose args: {args}")
        try:
            exit_code = await self.process_service.run(args, env=env, cwd=self.devcontainer_dir)
        except OSError as e:
            raise ComposeError(str(e)) from e

        if exit_code != 0:
            raise ComposeError(f"Exit code: {exit_code}", exit_code=exit_code)

    async def stop(self, ctx: RunContext) -> None:
        """Stop the compose project."""
        await self.run(ctx, ['stop'])


class ComposeProvisioner(Provisioner):
    """Brings the descriptor service up with compose."""

    def __init__(
        self,
        docker_service: DockerService,
        devcontainer: DevContainer,
        compose_runner: ComposeRunner,
        hook_runner: HookRunner,
    ):
        self.docker_service = docker_service
        self.devcontainer = devcontainer
        self.compose_runner = compose_runner
        self.hook_runner = hook_runner

    async def provision(self, ctx: RunContext) -> str:
        service = self.devcontainer.service
        labels = compose_labels(ctx.project_name, service)

        existing = await self.docker_service.find_container(labels)
        existed_before = existing is not None
        was_running_before = existed_before and existing.status == 'running'
        if existing is not None:
            logger.debug(f"State: {existing.status}")

        await self.compose_runner.run(
            ctx, ['up', '-d', service, *(self.devcontainer.run_services or [])]
        )

        container = await self.docker_service.find_container(labels)
        if container is None:
            raise ContainerCreateError("Could not locate container after compose up")

        if not existed_before:
            await self.hook_runner.run(CommandHook.POST_CREATE, container.id)
        if not was_running_before:
            await self.hook_runner.run(CommandHook.POST_START, container.id)
        await self.hook_runner.run(CommandHook.POST_ATTACH, container.id)

        return container.id
