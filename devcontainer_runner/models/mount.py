"""Mount models."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from docker.types import Mount


class MountType(Enum):
    """Mount types understood by the Docker engine."""
    BIND = "bind"
    VOLUME = "volume"
    TMPFS = "tmpfs"
    NPIPE = "npipe"


@dataclass(frozen=True)
class MountSpec:
    """A single container mount."""

    source: Optional[str] = None
    target: Optional[str] = None
    type: Optional[MountType] = None
    consistency: Optional[str] = None

    def to_docker_mount(self) -> Mount:
        """Convert to a docker-py Mount.

        When no type was given, docker-py's default (volume) applies.
        """
        kwargs = {
            'target': self.target,
            'source': self.source,
            'consistency': self.consistency,
        }
        if self.type is not None:
            kwargs['type'] = self.type.value
        return Mount(**kwargs)
