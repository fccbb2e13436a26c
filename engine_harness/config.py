"""Configuration for a harness run."""

import json
from collections.abc import Sequence
from pathlib import Path

from pydantic import ConfigDict, Field, ValidationError

from engine_harness.bundler import DEFAULT_BUNDLER_COMMAND
from engine_harness.errors import ConfigError
from engine_harness.models.base import Model

BOOTSTRAP_DIR = Path("test/__bootstrap__")


class HarnessConfig(Model):
    """File locations and tool settings for a harness run.

    Relative paths are resolved against ``base_dir``.
    """

    model_config = ConfigDict(extra="forbid")

    base_dir: Path = Field(default_factory=Path.cwd)
    registry_path: Path = Path("status.json")
    engines_dir: Path = Path("engines")
    library_path: Path = Path("lib/index.js")
    environment_path: Path = BOOTSTRAP_DIR / "environment.js"
    reporter_path: Path = BOOTSTRAP_DIR / "jasmine-reporter.js"
    executor_path: Path = BOOTSTRAP_DIR / "jasmine-exec.js"
    framework_entry: Path = BOOTSTRAP_DIR / "jasmine-setup.js"
    expect_entry: Path = Path("node_modules/expect/build/index.js")
    expect_global_name: str = "expect"
    spec_root: Path = Path("../near-membrane-node/src/__tests__")
    spec_pattern: str = "*.spec.js"
    bundler_command: Sequence[str] = DEFAULT_BUNDLER_COMMAND

    def resolve(self, path: Path) -> Path:
        """Resolve a configured path against the base directory."""
        return path if path.is_absolute() else self.base_dir / path


def load_config(config_path: Path | None = None, **overrides: object) -> HarnessConfig:
    """Load configuration from an optional JSON file plus explicit overrides.

    Overrides whose value is None are ignored so unset CLI flags keep the
    file or default value.

    Raises:
        ConfigError: If the file cannot be read or the result is invalid

    """
    data: dict[str, object] = {}
    if config_path is not None:
        try:
            loaded = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Cannot load configuration {config_path}: {e}") from e
        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration {config_path} must be a JSON object")
        data.update(loaded)
    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return HarnessConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
