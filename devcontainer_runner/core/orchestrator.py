"""Up and down orchestration for a devcontainer project."""

import asyncio
import logging
import signal
from enum import Enum
from typing import Optional

from ..models.context import RunContext
from ..models.devcontainer import ProvisioningMode
from ..services.docker_service import DockerService
from ..services.exceptions import ApplicationSpawnError, ExecCommandError
from ..services.process_service import ProcessService
from .compose import ComposeProvisioner, ComposeRunner
from .constants import DEFAULT_COMPOSE_BIN
from .container_config import ContainerConfigBuilder, devcontainer_envs
from .hooks import HookRunner
from .project import Project
from .provisioner import BuildProvisioner, ContainerMaterializer, ImageProvisioner, Provisioner
from .shutdown import ShutdownCoordinator

logger = logging.getLogger(__name__)


class OrchestratorState(Enum):
    """Lifecycle of one orchestrator."""
    IDLE = "idle"
    PROVISIONING = "provisioning"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class Orchestrator:
    """Brings a project up, supervises it and tears it down."""

    def __init__(
        self,
        project: Project,
        docker_service: DockerService,
        process_service: Optional[ProcessService] = None,
        compose_bin: str = DEFAULT_COMPOSE_BIN,
        docker_host: Optional[str] = None,
    ):
        self.project = project
        self.docker_service = docker_service
        self.process_service = process_service or ProcessService()
        self.compose_bin = compose_bin
        self.docker_host = docker_host
        self.state = OrchestratorState.IDLE

    def _compose_runner(self) -> ComposeRunner:
        return ComposeRunner(
            self.process_service,
            self.project.devcontainer,
            self.project.settings,
            self.project.devcontainer_dir,
            compose_bin=self.compose_bin,
            docker_host=self.docker_host,
        )

    def _create_provisioner(self) -> Provisioner:
        devcontainer = self.project.devcontainer
        hook_runner = HookRunner(self.docker_service, devcontainer, self.project.settings)

        if devcontainer.mode == ProvisioningMode.COMPOSE:
            return ComposeProvisioner(
                self.docker_service, devcontainer, self._compose_runner(), hook_runner
            )

        materializer = ContainerMaterializer(
            self.docker_service,
            self.project.root,
            ContainerConfigBuilder(self.project.root, devcontainer, self.project.settings),
            hook_runner,
        )
        if devcontainer.mode == ProvisioningMode.BUILD:
            return BuildProvisioner(
                self.docker_service, devcontainer, self.project.devcontainer_dir, materializer
            )
        return ImageProvisioner(self.docker_service, devcontainer, materializer)

    async def _run_initialize_command(self) -> None:
        command = self.project.devcontainer.initialize_command
        if command is None:
            return

        logger.info("Running initializeCommand on the host")
        try:
            exit_code = await self.process_service.run(
                command.to_args_vec(), cwd=self.project.root, shell=command.is_shell_line
            )
        except OSError as e:
            raise ExecCommandError(str(e)) from e

        if exit_code != 0:
            raise ExecCommandError(f"Exit code: {exit_code}", exit_code=exit_code)

    async def _spawn_application(self, ctx: RunContext) -> Optional[asyncio.subprocess.Process]:
        application = self.project.settings.application
        if application is None:
            return None

        env = dict(self.project.devcontainer.remote_env or {})
        env.update(devcontainer_envs(ctx))

        logger.info("Spawning application")
        try:
            return await self.process_service.spawn(
                application.cmd.to_args_vec(), env=env, shell=application.cmd.is_shell_line
            )
        except OSError as e:
            raise ApplicationSpawnError(str(e)) from e

    async def _wait_for_interrupt(self) -> None:
        loop = asyncio.get_running_loop()
        interrupted = asyncio.Event()
        loop.add_signal_handler(signal.SIGINT, interrupted.set)
        try:
            await interrupted.wait()
        finally:
            loop.remove_signal_handler(signal.SIGINT)

    async def _supervise(
        self,
        container_id: str,
        process: Optional[asyncio.subprocess.Process],
    ) -> bool:
        """Wait for the first of companion exit, container exit or interrupt.

        Returns:
            True if the project must be torn down
        """
        container_task = asyncio.create_task(self.docker_service.wait_container(container_id))
        interrupt_task = asyncio.create_task(self._wait_for_interrupt())
        tasks = {container_task, interrupt_task}

        app_task = None
        if process is not None:
            logger.info("Waiting for application")
            app_task = asyncio.create_task(process.wait())
            tasks.add(app_task)

        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        if app_task is not None and app_task in done:
            if app_task.exception() is not None:
                raise ApplicationSpawnError(str(app_task.exception())) from app_task.exception()
            exit_code = app_task.result()
            if exit_code != 0:
                logger.warning(f"Application exited with code {exit_code}")
            logger.info("Application has finished. Closing down")
            return True

        if container_task in done:
            container_task.result()
            if app_task is not None:
                logger.warning("Container has finished! Restart required")
            else:
                logger.warning("Container has finished! Nothing to do now. Closing down.")
            return False

        interrupt_task.result()
        logger.info("CTRL+C: Finishing now")
        return True

    async def up(self, should_wait: bool = True) -> None:
        """Provision the project, spawn the companion app and supervise it.

        Args:
            should_wait: Keep supervising after the container is ready

        Raises:
            NoDevContainerError: If the project has no loaded descriptor
            UpError: If any step of bringing the project up fails
        """
        ctx = self.project.create_context()

        self.state = OrchestratorState.PROVISIONING
        await self._run_initialize_command()

        logger.info("Starting containers")
        container_id = await self._create_provisioner().provision(ctx)
        logger.info(f"Containers are ready: {container_id}")
        self.state = OrchestratorState.RUNNING

        process = await self._spawn_application(ctx)

        logger.info(f"Should wait: {should_wait}")
        if not should_wait:
            return

        if await self._supervise(container_id, process):
            await self.down(from_up=True, ctx=ctx)
        else:
            self.state = OrchestratorState.TERMINATED

    async def down(self, from_up: bool = False, ctx: Optional[RunContext] = None) -> None:
        """Stop the project.

        Args:
            from_up: The teardown ends an `up`, so the shutdown action decides
            ctx: Run state to reuse, a fresh one is created when omitted

        Raises:
            NoDevContainerError: If the project has no loaded descriptor
        """
        logger.info("Shutting down containers")
        devcontainer = self.project.devcontainer
        ctx = ctx or self.project.create_context()

        self.state = OrchestratorState.SHUTTING_DOWN
        compose_runner = (
            self._compose_runner() if devcontainer.mode == ProvisioningMode.COMPOSE else None
        )
        coordinator = ShutdownCoordinator(self.docker_service, compose_runner)
        await coordinator.down(devcontainer.mode, devcontainer.shutdown_action, ctx, from_up=from_up)
        self.state = OrchestratorState.TERMINATED
