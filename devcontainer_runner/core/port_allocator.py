"""Application port allocation."""

import asyncio
import logging
import socket
from typing import Optional

from docker.models.containers import Container

from ..services.exceptions import DevContainerError
from .constants import LABEL_APPLICATION_PORT, PORT_HOST_IP

logger = logging.getLogger(__name__)


def _bind_free_port() -> Optional[int]:
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind((PORT_HOST_IP, 0))
            return sock.getsockname()[1]
    except OSError as e:
        logger.debug(f"Could not bind probe socket: {e}")
        return None


async def request_open_port() -> Optional[int]:
    """Ask the OS for a free TCP port.

    The probe socket is closed before the port is used, so another process
    may grab it in between. This is a best-effort allocation.
    """
    return await asyncio.to_thread(_bind_free_port)


def port_from_labels(container: Container) -> Optional[int]:
    """Read a previously allocated application port from the container labels."""
    labels = container.labels or {}
    if LABEL_APPLICATION_PORT not in labels:
        return None

    try:
        return int(labels[LABEL_APPLICATION_PORT])
    except ValueError as e:
        raise DevContainerError(
            f"Could not parse application port from container: {e}"
        ) from e


async def resolve_application_port(container: Optional[Container] = None) -> int:
    """Reuse the port recorded on an existing container, or allocate a new one."""
    if container is not None:
        port = port_from_labels(container)
        if port is not None:
            return port

    port = await request_open_port()
    if port is None:
        raise DevContainerError("Could not select an available port for application")
    return port
