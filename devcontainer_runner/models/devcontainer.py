"""Devcontainer descriptor models."""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator


class ProvisioningMode(Enum):
    """How the development container is materialized."""
    IMAGE = "image"
    BUILD = "build"
    COMPOSE = "compose"


class ShutdownAction(Enum):
    """What an automatic teardown is allowed to stop."""
    NONE = "none"
    STOP_CONTAINER = "stopContainer"
    STOP_COMPOSE = "stopCompose"

    @classmethod
    def parse(cls, value: str) -> "ShutdownAction":
        """Parse a shutdown action, ignoring case."""
        lowered = value.lower()
        for action in cls:
            if action.value.lower() == lowered:
                return action
        raise ValueError(f"Invalid shutdown action '{lowered}'")


class CommandSpec(RootModel[Union[str, List[str]]]):
    """A command given either as a single shell line or as an argument list."""

    model_config = ConfigDict(frozen=True)

    @property
    def is_shell_line(self) -> bool:
        return isinstance(self.root, str)

    def to_args_vec(self) -> List[str]:
        """Return the command as an argument vector.

        A single line becomes a one-element vector holding the whole line,
        so it is not shell-tokenized.
        """
        if isinstance(self.root, str):
            return [self.root]
        return list(self.root)

    def to_shell_args(self) -> List[str]:
        """Return an argument vector where a single line runs through /bin/sh."""
        if isinstance(self.root, str):
            return ['/bin/sh', '-c', self.root]
        return list(self.root)


class AppPort(RootModel[Union[int, List[int], str]]):
    """Application port(s) published by the container."""

    model_config = ConfigDict(frozen=True)

    def to_ports(self) -> List[str]:
        if isinstance(self.root, list):
            return [str(port) for port in self.root]
        return [str(self.root)]


class DockerComposeFile(RootModel[Union[str, List[str]]]):
    """One compose file or a list of them."""

    model_config = ConfigDict(frozen=True)

    def to_files(self) -> List[str]:
        if isinstance(self.root, str):
            return [self.root]
        return list(self.root)

    def is_empty(self) -> bool:
        if isinstance(self.root, str):
            return not self.root.strip()
        return len(self.root) == 0


class BuildOptions(BaseModel):
    """The `build` section of a descriptor."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dockerfile: str = Field(..., validation_alias='dockerFile')
    context: Optional[str] = None
    args: Optional[Dict[str, str]] = None
    target: Optional[str] = None


class DevContainer(BaseModel):
    """A validated devcontainer descriptor."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')

    name: Optional[str] = None
    image: Optional[str] = None
    build: Optional[BuildOptions] = None
    app_port: Optional[AppPort] = Field(None, alias='appPort')
    container_env: Optional[Dict[str, str]] = Field(None, alias='containerEnv')
    remote_env: Optional[Dict[str, str]] = Field(None, alias='remoteEnv')
    container_user: Optional[str] = Field(None, alias='containerUser')
    remote_user: Optional[str] = Field(None, alias='remoteUser')
    mounts: Optional[List[str]] = None
    workspace_mount: Optional[str] = Field(None, alias='workspaceMount')
    run_args: Optional[List[str]] = Field(None, alias='runArgs')
    override_command: bool = Field(True, alias='overrideCommand')
    shutdown_action: ShutdownAction = Field(ShutdownAction.NONE, alias='shutdownAction')

    docker_compose_file: Optional[DockerComposeFile] = Field(None, alias='dockerComposeFile')
    service: Optional[str] = None
    run_services: Optional[List[str]] = Field(None, alias='runServices')
    forward_ports: Optional[List[int]] = Field(None, alias='forwardPorts')

    post_create_command: Optional[CommandSpec] = Field(None, alias='postCreateCommand')
    post_start_command: Optional[CommandSpec] = Field(None, alias='postStartCommand')
    post_attach_command: Optional[CommandSpec] = Field(None, alias='postAttachCommand')
    initialize_command: Optional[CommandSpec] = Field(None, alias='initializeCommand')

    @field_validator('shutdown_action', mode='before')
    @classmethod
    def _parse_shutdown_action(cls, value):
        if value is None:
            return ShutdownAction.NONE
        if isinstance(value, str):
            return ShutdownAction.parse(value)
        return value

    @model_validator(mode='after')
    def _check_sources(self) -> "DevContainer":
        sources = [self.image is not None, self.docker_compose_file is not None, self.build is not None]
        if sum(sources) > 1:
            raise ValueError("Please specify only one of: image, dockerComposeFile or build")
        if sum(sources) == 0:
            raise ValueError("Please specify at least one of: image, dockerComposeFile or build")

        if self.image is not None and not self.image.strip():
            raise ValueError(f"Invalid image: '{self.image}'")

        if self.build is not None and not self.build.dockerfile.strip():
            raise ValueError(f"Invalid docker file: '{self.build.dockerfile}'")

        if self.docker_compose_file is not None:
            if self.docker_compose_file.is_empty():
                raise ValueError("Invalid docker-compose file")
            if not self.service:
                raise ValueError("Invalid service!")

        return self

    @property
    def mode(self) -> ProvisioningMode:
        if self.image is not None:
            return ProvisioningMode.IMAGE
        if self.build is not None:
            return ProvisioningMode.BUILD
        return ProvisioningMode.COMPOSE

    def get_name(self, path: Path) -> str:
        """Project name: the descriptor name, else the project directory name."""
        return self.name if self.name else path.name
