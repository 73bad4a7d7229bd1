"""Models for the generated compose override file."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ComposeServiceOverride(BaseModel):
    """Override for a single compose service."""
    ports: List[str] = Field(default_factory=list)
    volumes: Optional[List[str]] = None
    environment: Dict[str, str] = Field(default_factory=dict)


class ComposeOverride(BaseModel):
    """Minimal compose document holding the user overrides."""
    version: Optional[str] = None
    services: Dict[str, ComposeServiceOverride] = Field(default_factory=dict)

    def to_compose_dict(self) -> dict:
        """Convert to the plain structure written to YAML."""
        return self.model_dump(exclude_none=True)
