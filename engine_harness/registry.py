"""Discovery of installed engines from the installer's status document."""

import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import ValidationError

from engine_harness.errors import RegistryError
from engine_harness.models.engine import EngineDescriptor, EngineStatus

log = logging.getLogger(__name__)


def load_engines(registry_path: Path, engines_dir: Path) -> Sequence[EngineDescriptor]:
    """Load installed engines in registry order.

    Args:
        registry_path: Path to the status JSON document
        engines_dir: Directory holding one executable per engine name

    Returns:
        Engine descriptors, empty when the registry is missing or blank

    Raises:
        RegistryError: If the document is not a valid status document

    """
    if not registry_path.exists():
        log.warning("Engine registry %s not found, no engines to run", registry_path)
        return []

    try:
        raw = registry_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise RegistryError(
            f"Cannot decode engine registry {registry_path}: {e}"
        ) from e
    if not raw.strip():
        log.warning("Engine registry %s is empty, no engines to run", registry_path)
        return []

    try:
        status = EngineStatus.model_validate_json(raw)
    except ValidationError as e:
        raise RegistryError(f"Invalid engine registry {registry_path}: {e}") from e

    engines = [
        EngineDescriptor(
            name=name, executable=engines_dir / name, version=installed.version
        )
        for name, installed in status.installed.items()
    ]
    log.info(
        "Discovered %d engine(s): %s",
        len(engines),
        ", ".join(engine.name for engine in engines) or "none",
    )
    return engines
