"""Teardown policy."""

import logging
from typing import Optional

from ..models.context import RunContext
from ..models.devcontainer import ProvisioningMode, ShutdownAction
from ..services.docker_service import DockerService
from .compose import ComposeRunner
from .container_config import identity_labels

logger = logging.getLogger(__name__)


def should_stop(mode: ProvisioningMode, action: ShutdownAction, from_up: bool) -> bool:
    """Whether a teardown must stop anything.

    An explicit `down` always stops. A teardown at the end of `up` only stops
    when the shutdown action matches the provisioning mode.
    """
    if not from_up:
        return True
    if mode == ProvisioningMode.COMPOSE:
        return action == ShutdownAction.STOP_COMPOSE
    return action == ShutdownAction.STOP_CONTAINER


class ShutdownCoordinator:
    """Stops the container or the compose project of a run."""

    def __init__(self, docker_service: DockerService, compose_runner: Optional[ComposeRunner] = None):
        self.docker_service = docker_service
        self.compose_runner = compose_runner

    async def _stop_container(self, ctx: RunContext) -> None:
        container = await self.docker_service.find_container(identity_labels(ctx.project_name))
        if container is None:
            logger.info("No container to stop")
            return

        logger.info(f"Stopping container {container.short_id}")
        await self.docker_service.stop_container(container)

    async def down(
        self,
        mode: ProvisioningMode,
        action: ShutdownAction,
        ctx: RunContext,
        from_up: bool = False,
    ) -> bool:
        """Tear the project down according to the policy.

        Returns:
            True if anything was asked to stop

        Raises:
            ComposeError: If `compose stop` fails
            DockerServiceError: If stopping the container fails
        """
        if not should_stop(mode, action, from_up):
            expected = (
                ShutdownAction.STOP_COMPOSE if mode == ProvisioningMode.COMPOSE
                else ShutdownAction.STOP_CONTAINER
            )
            logger.info(f"Not shutting down. Shutdown action is not '{expected.value}'")
            return False

        if mode == ProvisioningMode.COMPOSE:
            await self.compose_runner.stop(ctx)
        else:
            await self._stop_container(ctx)
        return True
