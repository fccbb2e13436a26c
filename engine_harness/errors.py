"""Exceptions raised while preparing a harness run."""

from pathlib import Path


class HarnessError(Exception):
    """Base class for errors that abort a harness run."""


class SourceParseError(HarnessError):
    """Raised when spec source cannot be parsed as script source."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        location = f"{path}: " if path is not None else ""
        super().__init__(f"{location}{message}")


class BundleError(HarnessError):
    """Raised when the bundler exits unsuccessfully."""


class RegistryError(HarnessError):
    """Raised when the engine registry document is malformed."""


class SourceReadError(HarnessError):
    """Raised when a fragment or spec file cannot be read as UTF-8 text."""


class ConfigError(HarnessError):
    """Raised when the configuration file is missing or invalid."""
