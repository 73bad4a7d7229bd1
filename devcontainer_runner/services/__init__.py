"""Service layer for abstracting Docker and subprocess operations."""

from .docker_service import DockerService
from .process_service import ProcessService
from .exceptions import (
    DevContainerError,
    ConfigDoesNotExistError,
    InvalidConfigError,
    MountParseError,
    InvalidSettingsError,
    NoDevContainerError,
    DockerServiceError,
    UpError,
    ContainerCreateError,
    ApplicationSpawnError,
    ExecCommandError,
    ImagePullError,
    ComposeError,
)

__all__ = [
    "DockerService",
    "ProcessService",
    "DevContainerError",
    "ConfigDoesNotExistError",
    "InvalidConfigError",
    "MountParseError",
    "InvalidSettingsError",
    "NoDevContainerError",
    "DockerServiceError",
    "UpError",
    "ContainerCreateError",
    "ApplicationSpawnError",
    "ExecCommandError",
    "ImagePullError",
    "ComposeError",
]
