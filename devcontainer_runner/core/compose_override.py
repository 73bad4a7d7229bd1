"""Generation of the compose override file holding user settings."""

import logging
import tempfile
from pathlib import Path
from typing import Dict, Iterable, Optional

import yaml

from ..models.compose import ComposeOverride, ComposeServiceOverride
from ..models.settings import Settings
from ..services.exceptions import ComposeError
from .constants import COMPOSE_OVERRIDE_SUFFIX

logger = logging.getLogger(__name__)


def read_compose_version(compose_file: Path) -> Optional[str]:
    """Read the top-level `version` of a compose file, if it declares one.

    Raises:
        ComposeError: If the file cannot be read or is not valid YAML
    """
    try:
        with open(compose_file) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ComposeError(f"Could not read compose file {compose_file}: {e}") from e

    if not isinstance(data, dict) or data.get('version') is None:
        return None
    return str(data['version'])


def override_path(service_name: str) -> Path:
    """Where the override for a service is written."""
    return Path(tempfile.gettempdir()) / f"{service_name}{COMPOSE_OVERRIDE_SUFFIX}"


def build_compose_override(
    settings: Settings,
    service_name: str,
    version: Optional[str],
    envs: Optional[Dict[str, str]] = None,
    extra_ports: Iterable[int] = (),
) -> ComposeOverride:
    """Build the override document for one service."""
    ports = [*(settings.forward_ports or []), *extra_ports]
    environment = dict(envs or {})
    environment.update(settings.envs or {})

    service = ComposeServiceOverride(
        ports=[f"{p}:{p}" for p in ports],
        volumes=list(settings.mounts) if settings.mounts else None,
        environment=environment,
    )
    return ComposeOverride(version=version, services={service_name: service})


def generate_compose_override(
    settings: Settings,
    service_name: str,
    version: Optional[str],
    envs: Optional[Dict[str, str]] = None,
    extra_ports: Iterable[int] = (),
) -> Path:
    """Write the override file and return its path.

    The file is overwritten on every run and never removed.

    Raises:
        ComposeError: If the file cannot be written
    """
    override = build_compose_override(settings, service_name, version, envs, extra_ports)
    path = override_path(service_name)

    try:
        with open(path, 'w') as f:
            yaml.safe_dump(override.to_compose_dict(), f, default_flow_style=False, sort_keys=False)
    except OSError as e:
        raise ComposeError(f"Could not write compose override {path}: {e}") from e

    logger.debug(f"Wrote compose override: {path}")
    return path
