"""Per-command runtime models."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .mount import MountSpec


@dataclass
class RunContext:
    """State owned by one `up` or `down` invocation."""

    project_name: str
    application_port: Optional[int] = None


@dataclass
class ContainerSpec:
    """Everything needed to create the development container."""

    image: str
    name: Optional[str] = None
    environment: List[str] = field(default_factory=list)
    mounts: List[MountSpec] = field(default_factory=list)
    ports: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    labels: Dict[str, str] = field(default_factory=dict)
    command: Optional[List[str]] = None

    def to_create_kwargs(self) -> dict:
        """Keyword arguments for docker-py's `containers.create`."""
        kwargs = {
            'image': self.image,
            'environment': self.environment,
            'mounts': [m.to_docker_mount() for m in self.mounts],
            'ports': self.ports,
            'labels': self.labels,
        }
        if self.name:
            kwargs['name'] = self.name
        if self.command is not None:
            kwargs['command'] = self.command
        return kwargs
