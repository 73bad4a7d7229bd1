"""Docker service for abstracting Docker operations."""

import asyncio
import logging
import threading
from typing import IO, Any, Optional

import docker
import docker.errors
import requests.exceptions
from docker.models.containers import Container

from ..models.context import ContainerSpec
from .exceptions import (
    ContainerCreateError,
    DockerServiceError,
    ImagePullError,
)

logger = logging.getLogger(__name__)

# Transport failures surface from requests rather than docker.errors
TRANSPORT_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException)


def _decode(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode('utf-8', errors='replace').rstrip()


class DockerService:
    """Asynchronous facade over the blocking docker-py client.

    Every call runs in a worker thread so the event loop stays free to
    watch the companion process and interrupt signals.
    """

    def __init__(self, base_url: Optional[str] = None):
        """Connect to the Docker daemon and test the connection.

        Args:
            base_url: Docker endpoint; the environment defaults are used when omitted
        """
        try:
            if base_url:
                self.client = docker.DockerClient(base_url=base_url)
            else:
                self.client = docker.from_env()
            self.client.ping()
        except TRANSPORT_ERRORS as e:
            if "connection refused" in str(e).lower() or "cannot connect" in str(e).lower():
                raise DockerServiceError(
                    "Docker daemon is not running. Please start Docker Desktop or the Docker service."
                ) from e
            raise DockerServiceError(str(e)) from e

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.client.close()

    async def list_containers(
        self,
        labels: Optional[dict[str, str]] = None,
        name: Optional[str] = None,
        all: bool = True,
    ) -> list[Container]:
        """List containers with optional filters.

        Args:
            labels: Label filters, all of which must match
            name: Name filter (substring match on the daemon side)
            all: Include stopped containers

        Returns:
            Containers in the order the daemon returns them

        Raises:
            DockerServiceError: If listing fails
        """
        filters: dict[str, Any] = {}
        if labels:
            filters['label'] = [f"{k}={v}" for k, v in labels.items()]
        if name:
            filters['name'] = [name]

        try:
            return await asyncio.to_thread(self.client.containers.list, all=all, filters=filters)
        except TRANSPORT_ERRORS as e:
            raise DockerServiceError(f"Failed to list containers: {e}") from e

    async def find_container(self, labels: dict[str, str]) -> Optional[Container]:
        """Return the first container matching every label, if any.

        When several containers match, the first one in the daemon's
        ordering wins.
        """
        containers = await self.list_containers(labels=labels)
        if not containers:
            return None
        if len(containers) > 1:
            logger.warning(
                f"Found {len(containers)} containers for {labels}, using {containers[0].short_id}"
            )
        return containers[0]

    async def container_name_exists(self, name: str) -> bool:
        """Check whether a container with exactly this name exists."""
        containers = await self.list_containers(name=name)
        return any(c.name == name for c in containers)

    def _drain_pull(self, image: str) -> None:
        for event in self.client.api.pull(image, stream=True, decode=True):
            if 'error' in event:
                logger.error(f"Pull error: {event['error']}")
                raise ImagePullError(event['error'])
            logger.debug(f"Pull output: {event}")

    async def pull_image(self, image: str) -> None:
        """Pull an image, draining the whole progress stream.

        Raises:
            ImagePullError: On the first error reported by the stream
        """
        logger.info(f"Pulling image: {image}")
        try:
            await asyncio.to_thread(self._drain_pull, image)
        except TRANSPORT_ERRORS as e:
            raise ImagePullError(str(e)) from e
        logger.info("Pulling image: done")

    def _drain_build(self, **build_kwargs) -> None:
        for event in self.client.api.build(**build_kwargs):
            if 'error' in event:
                logger.error(f"Build error: {event['error']}")
                raise ImagePullError(event['error'])
            if 'stream' in event:
                logger.debug(event['stream'].rstrip())
            else:
                logger.debug(f"Build output: {event}")

    async def build_image(
        self,
        fileobj: IO[bytes],
        dockerfile: str,
        tag: str,
        buildargs: Optional[dict[str, str]] = None,
        target: Optional[str] = None,
    ) -> None:
        """Build an image from a gzipped tar context.

        Args:
            fileobj: Gzipped tar archive holding the build context
            dockerfile: Path to the Dockerfile inside the archive
            tag: Tag for the image
            buildargs: Build arguments
            target: Build stage to stop at

        Raises:
            ImagePullError: On the first error reported by the build stream
        """
        logger.info(f"Building image: {tag}")
        try:
            await asyncio.to_thread(
                self._drain_build,
                fileobj=fileobj,
                custom_context=True,
                encoding='gzip',
                dockerfile=dockerfile,
                tag=tag,
                rm=True,
                decode=True,
                buildargs=buildargs or {},
                target=target,
            )
        except TRANSPORT_ERRORS as e:
            raise ImagePullError(str(e)) from e
        logger.info("Building image: done")

    async def create_container(self, spec: ContainerSpec) -> Container:
        """Create a container from a creation spec.

        Raises:
            ContainerCreateError: If the daemon refuses the container
        """
        try:
            return await asyncio.to_thread(self.client.containers.create, **spec.to_create_kwargs())
        except docker.errors.ImageNotFound as e:
            raise ContainerCreateError(f"Image '{spec.image}' not found") from e
        except TRANSPORT_ERRORS as e:
            raise ContainerCreateError(str(e)) from e

    async def start_container(self, container: Container) -> None:
        """Start a created or stopped container."""
        try:
            await asyncio.to_thread(container.start)
        except TRANSPORT_ERRORS as e:
            raise DockerServiceError(f"Failed to start container: {e}") from e

    async def stop_container(self, container: Container) -> None:
        """Stop a container. A container that vanished in the meantime is ignored."""
        try:
            await asyncio.to_thread(container.stop)
        except docker.errors.NotFound:
            logger.info(f"Container {container.short_id} is already gone")
        except TRANSPORT_ERRORS as e:
            raise DockerServiceError(f"Failed to stop container: {e}") from e

    def _run_exec(self, container_id: str, cmd: list[str]) -> Optional[int]:
        exec_id = self.client.api.exec_create(container_id, cmd, stdout=True, stderr=True)['Id']
        for stdout, stderr in self.client.api.exec_start(exec_id, stream=True, demux=True):
            if stdout:
                logger.debug(f"STDOUT: {_decode(stdout)}")
            if stderr:
                logger.debug(f"STDERR: {_decode(stderr)}")
        return self.client.api.exec_inspect(exec_id).get('ExitCode')

    async def exec_command(self, container_id: str, cmd: list[str]) -> Optional[int]:
        """Run a command inside a running container and wait for it.

        Output is streamed to the debug log.

        Returns:
            The exit code reported by the daemon
        """
        logger.info(f"Executing command in container: {container_id[:12]}")
        logger.debug(f"Args: {cmd}")
        try:
            return await asyncio.to_thread(self._run_exec, container_id, cmd)
        except TRANSPORT_ERRORS as e:
            raise DockerServiceError(f"Failed to execute in container: {e}") from e

    async def wait_container(self, container_id: str) -> dict:
        """Block until the container exits.

        The blocking wait runs in a daemon thread. If the awaiting task is
        cancelled the thread is abandoned, not interrupted: it keeps its
        HTTP connection open until the container stops or the process exits.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()

        def _resolve(result, error):
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)

        def _wait():
            result, error = None, None
            try:
                result = self.client.api.wait(container_id)
            except TRANSPORT_ERRORS as e:
                error = DockerServiceError(f"Failed waiting for container: {e}")
            try:
                loop.call_soon_threadsafe(_resolve, result, error)
            except RuntimeError:
                logger.debug("Event loop closed before the container wait finished")

        threading.Thread(target=_wait, name=f"wait-{container_id[:12]}", daemon=True).start()
        return await future
