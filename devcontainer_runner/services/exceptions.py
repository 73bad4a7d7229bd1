"""Custom exceptions for devcontainer-runner."""

from typing import Optional


class DevContainerError(Exception):
    """Base exception for all devcontainer-runner errors."""

    pass


class ConfigDoesNotExistError(DevContainerError):
    """Exception raised when the devcontainer descriptor file is missing."""

    def __init__(self, filename: str):
        super().__init__(f"Config file does not exist: {filename}")
        self.filename = filename


class InvalidConfigError(DevContainerError):
    """Exception raised when the devcontainer descriptor is not valid."""

    def __init__(self, detail: str):
        super().__init__(f"Config is not valid: {detail}")
        self.detail = detail


class MountParseError(InvalidConfigError):
    """Exception raised when a mount string cannot be parsed."""

    pass


class InvalidSettingsError(DevContainerError):
    """Exception raised when the user settings file is not valid."""

    def __init__(self, detail: str):
        super().__init__(f"Settings are not valid: {detail}")
        self.detail = detail


class NoDevContainerError(DevContainerError):
    """Exception raised when a command runs without a loaded descriptor."""

    def __init__(self):
        super().__init__("Unexpected error! No devcontainer project found!")


class DockerServiceError(DevContainerError):
    """Exception raised when talking to the Docker daemon fails."""

    def __init__(self, detail: str):
        super().__init__(f"Error trying to communicate with docker: {detail}")
        self.detail = detail


class UpError(DevContainerError):
    """Base exception for failures while bringing a project up."""

    reason = "Unexpected failure"

    def __init__(self, detail: str):
        super().__init__(f"Error trying to start project: {self.reason}: {detail}")
        self.detail = detail


class ContainerCreateError(UpError):
    """Exception raised when the container cannot be created or located."""

    reason = "Failed to create container"


class ApplicationSpawnError(UpError):
    """Exception raised when the companion application cannot be run."""

    reason = "Failed to spawn application"


class ExecCommandError(UpError):
    """Exception raised when a hook command exits with a non-zero code."""

    reason = "Failed to execute command"

    def __init__(self, detail: str, exit_code: Optional[int] = None):
        super().__init__(detail)
        self.exit_code = exit_code


class ImagePullError(UpError):
    """Exception raised when pulling or building an image fails."""

    reason = "Failed while trying to pull docker image"


class ComposeError(UpError):
    """Exception raised when the compose CLI fails."""

    reason = "Failed to run docker-compose"

    def __init__(self, detail: str, exit_code: Optional[int] = None):
        super().__init__(detail)
        self.exit_code = exit_code
