"""Models for the installed-engine registry."""

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from pydantic import Field

from engine_harness.models.base import Model


class InstalledEngine(Model):
    """Registry entry for one installed engine."""

    version: str | None = None


class EngineStatus(Model):
    """Registry document written by the engine installer."""

    installed: Mapping[str, InstalledEngine] = Field(default_factory=dict)


@dataclass(frozen=True, kw_only=True)
class EngineDescriptor:
    """A discovered standalone script engine."""

    name: str
    executable: Path
    version: str | None = None

    def __str__(self) -> str:
        return self.name
