"""Preparation and execution of a full cross-engine harness run."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from engine_harness.aggregator import Report, aggregate
from engine_harness.assembler import (
    discover_spec_files,
    prepare_programs,
    read_source,
)
from engine_harness.bundler import (
    LEGACY_MODULE_PLUGINS,
    SETUP_PLUGINS,
    BundleGenerator,
    BundleRequest,
)
from engine_harness.config import HarnessConfig
from engine_harness.models.engine import EngineDescriptor
from engine_harness.models.program import AssembledProgram, FragmentSet
from engine_harness.registry import load_engines
from engine_harness.runner import EngineRunner, run_all

log = logging.getLogger(__name__)


async def load_fragments(
    config: HarnessConfig, bundler: BundleGenerator
) -> FragmentSet:
    """Read the fixed fragments and build both bundles concurrently."""
    framework_request = BundleRequest(
        entry_path=config.resolve(config.framework_entry),
        plugins=SETUP_PLUGINS,
        format="es",
        context="globalThis",
    )
    expect_request = BundleRequest(
        entry_path=config.resolve(config.expect_entry),
        plugins=LEGACY_MODULE_PLUGINS,
        format="iife",
        name=config.expect_global_name,
    )

    environment, reporter, library, executor, framework, expect = await asyncio.gather(
        read_source(config.resolve(config.environment_path)),
        read_source(config.resolve(config.reporter_path)),
        read_source(config.resolve(config.library_path)),
        read_source(config.resolve(config.executor_path)),
        bundler.generate(framework_request),
        bundler.generate(expect_request),
    )

    return FragmentSet(
        environment=environment,
        framework=framework,
        expect=expect,
        reporter=reporter,
        library=library,
        executor=executor,
    )


@dataclass(frozen=True, kw_only=True)
class PreparedRun:
    """Everything needed to execute a run, fixed before execution starts."""

    engines: Sequence[EngineDescriptor]
    programs: Sequence[AssembledProgram]


@dataclass(frozen=True, kw_only=True)
class Harness:
    """Runs the assembled spec programs against every installed engine."""

    config: HarnessConfig
    runner: EngineRunner = field(default_factory=EngineRunner)

    @property
    def bundler(self) -> BundleGenerator:
        return BundleGenerator(
            command=tuple(self.config.bundler_command), cwd=self.config.base_dir
        )

    async def prepare(self) -> PreparedRun:
        """Load engines and fragments, then assemble one program per spec.

        Raises:
            HarnessError: If any preparation step fails

        """
        config = self.config
        engines = load_engines(
            config.resolve(config.registry_path), config.resolve(config.engines_dir)
        )
        fragments = await load_fragments(config, self.bundler)
        spec_files = discover_spec_files(
            config.resolve(config.spec_root), config.spec_pattern
        )
        programs = await prepare_programs(fragments, spec_files)
        return PreparedRun(engines=engines, programs=programs)

    def execute(self, prepared: PreparedRun) -> Report:
        """Run every (engine, program) pair sequentially and aggregate."""
        log.info(
            "Executing %d program(s) on %d engine(s)",
            len(prepared.programs),
            len(prepared.engines),
        )
        records = run_all(prepared.engines, prepared.programs, self.runner)
        return aggregate(records)
