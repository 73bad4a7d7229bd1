"""Image and build provisioning strategies."""

import asyncio
import hashlib
import io
import logging
import tarfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from docker.models.containers import Container

from ..models.context import RunContext
from ..models.devcontainer import DevContainer
from ..services.docker_service import DockerService
from ..services.exceptions import ContainerCreateError
from .constants import (
    BUILD_CONTEXT_PREFIX,
    BUILD_HASH_LENGTH,
    BUILD_IMAGE_PREFIX,
    DEFAULT_IMAGE_TAG,
    MAX_NAME_ATTEMPTS,
)
from .container_config import ContainerConfigBuilder, candidate_name, identity_labels
from .hooks import CommandHook, HookRunner
from .port_allocator import resolve_application_port

logger = logging.getLogger(__name__)


def format_image(image: str) -> str:
    """Append the default tag when the reference has none.

    The tag is looked for after the last `/` so a registry port is not
    mistaken for one.
    """
    if ':' in image.rsplit('/', 1)[-1]:
        return image
    return f"{image}:{DEFAULT_IMAGE_TAG}"


class Provisioner(ABC):
    """A way of bringing the development container up."""

    @abstractmethod
    async def provision(self, ctx: RunContext) -> str:
        """Make sure the container is running and return its id."""


class ContainerMaterializer:
    """Reuses, restarts or creates the labeled container of a project."""

    def __init__(
        self,
        docker_service: DockerService,
        project_root: Path,
        config_builder: ContainerConfigBuilder,
        hook_runner: HookRunner,
    ):
        self.docker_service = docker_service
        self.project_root = project_root
        self.config_builder = config_builder
        self.hook_runner = hook_runner

    async def _probe_name(self, image: str) -> Optional[str]:
        for attempt in range(1, MAX_NAME_ATTEMPTS + 1):
            name = candidate_name(self.project_root, image, attempt)
            if not await self.docker_service.container_name_exists(name):
                return name
        logger.warning(
            f"All {MAX_NAME_ATTEMPTS} container names are taken, letting docker pick one"
        )
        return None

    async def _reuse(self, container: Container, ctx: RunContext) -> str:
        ctx.application_port = await resolve_application_port(container)

        if container.status == 'running':
            logger.info(f"Container {container.short_id} is already running")
        else:
            logger.info(f"Starting stopped container {container.short_id}")
            await self.docker_service.start_container(container)
            await self.hook_runner.run(CommandHook.POST_START, container.id)

        await self.hook_runner.run(CommandHook.POST_ATTACH, container.id)
        return container.id

    async def materialize(self, image: str, ctx: RunContext) -> str:
        """Bring up the container for `image` and return its id.

        Raises:
            ContainerCreateError: If the container cannot be created
            ExecCommandError: If a hook fails
        """
        container = await self.docker_service.find_container(identity_labels(ctx.project_name))
        if container is not None:
            return await self._reuse(container, ctx)

        ctx.application_port = await resolve_application_port()
        name = await self._probe_name(image)
        spec = self.config_builder.build(image, ctx, name=name)

        logger.info(f"Creating container {name or '<unnamed>'} from {image}")
        container = await self.docker_service.create_container(spec)
        await self.docker_service.start_container(container)

        for hook in (CommandHook.POST_CREATE, CommandHook.POST_START, CommandHook.POST_ATTACH):
            await self.hook_runner.run(hook, container.id)

        return container.id


class ImageProvisioner(Provisioner):
    """Pulls the descriptor image and materializes a container from it."""

    def __init__(self, docker_service: DockerService, devcontainer: DevContainer,
                 materializer: ContainerMaterializer):
        self.docker_service = docker_service
        self.devcontainer = devcontainer
        self.materializer = materializer

    async def provision(self, ctx: RunContext) -> str:
        image = format_image(self.devcontainer.image)
        await self.docker_service.pull_image(image)
        return await self.materializer.materialize(image, ctx)


def build_context_archive(devcontainer_dir: Path) -> io.BytesIO:
    """Pack the `.devcontainer` folder into a gzipped tar under a fixed prefix."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode='w:gz') as tar:
        tar.add(str(devcontainer_dir), arcname=BUILD_CONTEXT_PREFIX)
    buffer.seek(0)
    return buffer


class BuildProvisioner(Provisioner):
    """Builds an image from the descriptor Dockerfile and materializes it."""

    def __init__(self, docker_service: DockerService, devcontainer: DevContainer,
                 devcontainer_dir: Path, materializer: ContainerMaterializer):
        self.docker_service = docker_service
        self.devcontainer = devcontainer
        self.devcontainer_dir = devcontainer_dir
        self.materializer = materializer

    def image_tag(self) -> str:
        """Tag derived from the Dockerfile contents.

        Raises:
            ContainerCreateError: If the Dockerfile cannot be read
        """
        dockerfile = self.devcontainer_dir / self.devcontainer.build.dockerfile
        try:
            contents = dockerfile.read_bytes()
        except OSError as e:
            raise ContainerCreateError(f"Could not read docker file {dockerfile}: {e}") from e

        digest = hashlib.sha1(contents).hexdigest()
        return f"{BUILD_IMAGE_PREFIX}{digest[:BUILD_HASH_LENGTH]}"

    async def provision(self, ctx: RunContext) -> str:
        build = self.devcontainer.build
        tag = self.image_tag()
        if build.context:
            logger.debug(f"Ignoring build context '{build.context}', using {self.devcontainer_dir}")

        archive = await asyncio.to_thread(build_context_archive, self.devcontainer_dir)
        await self.docker_service.build_image(
            archive,
            dockerfile=f"{BUILD_CONTEXT_PREFIX}/{build.dockerfile}",
            tag=tag,
            buildargs=build.args,
            target=build.target,
        )
        return await self.materializer.materialize(tag, ctx)
