"""Container creation-spec building."""

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..models.context import ContainerSpec, RunContext
from ..models.devcontainer import DevContainer
from ..models.mount import MountSpec
from ..models.settings import Settings
from .constants import (
    CONTAINER_NAME_MARKER,
    DEFAULT_WORKSPACE_TARGET,
    ENV_APPLICATION_PORT,
    ENV_PROJECT,
    KEEP_ALIVE_COMMAND,
    LABEL_APPLICATION_PORT,
    LABEL_DEVCONTAINER,
    LABEL_NAME,
    PORT_HOST_IP,
)
from .mount_parser import parse_mount

_INVALID_NAME_CHARS = re.compile(r'[^a-zA-Z0-9_.-]')


def identity_labels(project_name: str) -> Dict[str, str]:
    """Labels identifying the managed container of an image or build project."""
    return {LABEL_DEVCONTAINER: 'true', LABEL_NAME: project_name}


def devcontainer_envs(ctx: RunContext) -> Dict[str, str]:
    """Variables describing the project, for the container and the companion app."""
    envs = {ENV_PROJECT: ctx.project_name}
    if ctx.application_port is not None:
        envs[ENV_APPLICATION_PORT] = str(ctx.application_port)
    return envs


def image_base_name(image: str) -> str:
    """Last path component of an image reference, without its tag."""
    base = image.rsplit('/', 1)[-1].split('@', 1)[0].split(':', 1)[0]
    return _INVALID_NAME_CHARS.sub('_', base)


def candidate_name(project_root: Path, image: str, attempt: int) -> str:
    """Container name tried on the given probing attempt."""
    dirname = _INVALID_NAME_CHARS.sub('_', project_root.name)
    return f"{dirname}_{CONTAINER_NAME_MARKER}_{image_base_name(image)}_{attempt}"


class ContainerConfigBuilder:
    """Merges the descriptor, user settings and run state into a ContainerSpec."""

    def __init__(self, project_root: Path, devcontainer: DevContainer, settings: Settings):
        self.project_root = project_root
        self.devcontainer = devcontainer
        self.settings = settings

    def _get_ports(self, ctx: RunContext) -> Dict[str, Tuple[str, str]]:
        ports: List[str] = []
        if self.devcontainer.app_port is not None:
            ports.extend(self.devcontainer.app_port.to_ports())
        ports.extend(str(p) for p in self.devcontainer.forward_ports or [])
        ports.extend(str(p) for p in self.settings.forward_ports or [])
        if ctx.application_port is not None:
            ports.append(str(ctx.application_port))

        return {f"{port}/tcp": (PORT_HOST_IP, port) for port in ports}

    def _get_environment(self, ctx: RunContext) -> List[str]:
        # Duplicated keys are kept, the engine resolves them in order
        env = [f"{k}={v}" for k, v in devcontainer_envs(ctx).items()]
        env.extend(f"{k}={v}" for k, v in (self.devcontainer.container_env or {}).items())
        env.extend(f"{k}={v}" for k, v in (self.settings.envs or {}).items())
        return env

    def _get_mounts(self) -> List[MountSpec]:
        workspace = self.devcontainer.workspace_mount or (
            f"source={self.project_root},target={DEFAULT_WORKSPACE_TARGET},"
            f"type=bind,consistency=cached"
        )
        mounts = [parse_mount(workspace)]
        mounts.extend(parse_mount(m) for m in self.devcontainer.mounts or [])
        mounts.extend(parse_mount(m) for m in self.settings.mounts or [])
        return mounts

    def _get_labels(self, ctx: RunContext) -> Dict[str, str]:
        labels = identity_labels(ctx.project_name)
        if ctx.application_port is not None:
            labels[LABEL_APPLICATION_PORT] = str(ctx.application_port)
        return labels

    def build(self, image: str, ctx: RunContext, name: Optional[str] = None) -> ContainerSpec:
        """Build the creation spec for a new development container.

        Raises:
            MountParseError: If any mount string is malformed
        """
        command = list(KEEP_ALIVE_COMMAND) if self.devcontainer.override_command else None
        return ContainerSpec(
            image=image,
            name=name,
            environment=self._get_environment(ctx),
            mounts=self._get_mounts(),
            ports=self._get_ports(ctx),
            labels=self._get_labels(ctx),
            command=command,
        )
