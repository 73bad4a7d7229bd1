"""User settings models."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .devcontainer import CommandSpec


class Application(BaseModel):
    """Companion application spawned on the host after the container is up."""

    model_config = ConfigDict(frozen=True)

    cmd: CommandSpec


class Settings(BaseModel):
    """User-level settings merged on top of every project descriptor."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra='ignore')

    application: Optional[Application] = None
    mounts: Optional[List[str]] = None
    envs: Optional[Dict[str, str]] = None
    post_create_command: Optional[CommandSpec] = Field(None, alias='postCreateCommand')
    post_start_command: Optional[CommandSpec] = Field(None, alias='postStartCommand')
    post_attach_command: Optional[CommandSpec] = Field(None, alias='postAttachCommand')
    forward_ports: Optional[List[int]] = Field(None, alias='forwardPorts')
