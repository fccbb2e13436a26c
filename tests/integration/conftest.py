"""Fixtures for tests that spawn fake engine executables."""

from pathlib import Path
from typing import Protocol

import pytest

from engine_harness.models.engine import EngineDescriptor


class MakeEngineFn(Protocol):
    """Protocol for fake engine creation function."""

    def __call__(self, name: str, script: str) -> EngineDescriptor:
        """Write an executable shell script and describe it as an engine."""


@pytest.fixture
def engines_dir(tmp_path: Path) -> Path:
    """Create the directory holding engine executables."""
    path = tmp_path / "engines"
    path.mkdir()
    return path


@pytest.fixture
def make_engine(engines_dir: Path) -> MakeEngineFn:
    """Return a function to create fake engines from shell script bodies."""

    def _make(name: str, script: str) -> EngineDescriptor:
        executable = engines_dir / name
        executable.write_text(f"#!/bin/sh\n{script}\n")
        executable.chmod(0o755)
        return EngineDescriptor(name=name, executable=executable)

    return _make
