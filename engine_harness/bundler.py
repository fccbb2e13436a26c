"""Standalone bundle generation through the rollup command line."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from engine_harness.errors import BundleError

log = logging.getLogger(__name__)

BundleFormat = Literal["es", "iife", "cjs", "umd"]
PluginChain = Sequence[str]

SETUP_PLUGINS: PluginChain = ()

# Order matters: commonjs interop must run before the polyfills, and
# bare-module resolution goes last.
LEGACY_MODULE_PLUGINS: PluginChain = (
    "@rollup/plugin-commonjs",
    "rollup-plugin-polyfill-node",
    "@rollup/plugin-node-resolve",
)

DEFAULT_BUNDLER_COMMAND: Sequence[str] = ("npx", "rollup")


@dataclass(frozen=True, kw_only=True)
class BundleRequest:
    """Everything the bundler needs to emit one self-contained file."""

    entry_path: Path
    plugins: PluginChain = SETUP_PLUGINS
    format: BundleFormat = "es"
    name: str | None = None
    context: str | None = None

    def __post_init__(self) -> None:
        if self.format in {"iife", "umd"} and not self.name:
            raise ValueError(f"Bundle format '{self.format}' requires a global name")

    def to_args(self) -> list[str]:
        """Build rollup CLI arguments for this request."""
        args = ["--input", str(self.entry_path), "--format", self.format]
        if self.name:
            args += ["--name", self.name]
        if self.context:
            args += ["--context", self.context]
        for plugin in self.plugins:
            args += ["--plugin", plugin]
        return args


@dataclass(frozen=True, kw_only=True)
class BundleGenerator:
    """Produces single-file bundles by shelling out to rollup."""

    command: Sequence[str] = DEFAULT_BUNDLER_COMMAND
    cwd: Path | None = None

    async def generate(self, request: BundleRequest) -> str:
        """Bundle the module graph rooted at the request's entry point.

        Args:
            request: Entry point, plugin chain and output format

        Returns:
            Source text of the emitted bundle

        Raises:
            BundleError: If the bundler cannot be started or exits non-zero

        """
        argv = [*self.command, *request.to_args()]
        log.info(
            "Bundling %s (format=%s, plugins=%s)",
            request.entry_path,
            request.format,
            ", ".join(request.plugins) or "none",
        )

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=self.cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise BundleError(f"Cannot start bundler '{argv[0]}': {e}") from e

        stdout, stderr = await process.communicate()

        if process.returncode != 0:
            raise BundleError(
                f"Bundling {request.entry_path} failed: {stderr.decode().strip()}"
            )

        if stderr:
            # rollup reports progress and warnings on stderr
            log.debug("Bundler output for %s: %s", request.entry_path, stderr.decode())

        return stdout.decode()


async def generate(
    entry_path: Path,
    plugin_chain: PluginChain,
    format: BundleFormat,
    *,
    name: str | None = None,
    generator: BundleGenerator | None = None,
) -> str:
    """Bundle one entry point with the given plugin chain and format."""
    generator = generator or BundleGenerator()
    request = BundleRequest(
        entry_path=entry_path, plugins=plugin_chain, format=format, name=name
    )
    return await generator.generate(request)
