"""Models for devcontainer-runner."""

from .devcontainer import (
    AppPort,
    BuildOptions,
    CommandSpec,
    DevContainer,
    DockerComposeFile,
    ProvisioningMode,
    ShutdownAction,
)
from .settings import Application, Settings
from .mount import MountSpec, MountType
from .compose import ComposeOverride, ComposeServiceOverride
from .context import ContainerSpec, RunContext

__all__ = [
    'AppPort',
    'BuildOptions',
    'CommandSpec',
    'DevContainer',
    'DockerComposeFile',
    'ProvisioningMode',
    'ShutdownAction',
    'Application',
    'Settings',
    'MountSpec',
    'MountType',
    'ComposeOverride',
    'ComposeServiceOverride',
    'ContainerSpec',
    'RunContext',
]
