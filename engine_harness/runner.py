"""Sequential execution of assembled programs against every engine."""

import json
import logging
import os
import subprocess
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import TypeAdapter, ValidationError

from engine_harness.models.engine import EngineDescriptor
from engine_harness.models.program import AssembledProgram
from engine_harness.models.results import (
    RESULT_SCHEMA_VERSION,
    Diagnostic,
    ExecutionOutcome,
    ParsedOutcome,
    ResultEnvelope,
    RunRecord,
    SpecResult,
)

log = logging.getLogger(__name__)

_RESULTS_ADAPTER = TypeAdapter(list[SpecResult])


def parse_results(payload: object) -> Sequence[SpecResult]:
    """Validate a decoded result payload against the result schema.

    A bare array is treated as the current schema version. An object must be
    a versioned envelope with a supported version.

    Raises:
        ValidationError: If the payload does not match the schema
        ValueError: If the envelope carries an unsupported version

    """
    if isinstance(payload, dict):
        envelope = ResultEnvelope.model_validate(payload)
        if envelope.version != RESULT_SCHEMA_VERSION:
            raise ValueError(f"Unsupported result schema version {envelope.version}")
        return envelope.results
    return _RESULTS_ADAPTER.validate_python(payload)


def classify_output(stdout: str, stderr: str) -> ExecutionOutcome:
    """Turn captured engine output into an execution outcome.

    Any error output makes the run a diagnostic, whatever the standard output
    holds.
    """
    if stderr:
        return Diagnostic(kind="engine_error", message=stderr, raw_output=stdout)

    try:
        payload = json.loads(stdout)
    except json.JSONDecodeError as e:
        return Diagnostic(
            kind="malformed_output",
            message=f"Output is not JSON: {e}",
            raw_output=stdout,
        )

    try:
        results = parse_results(payload)
    except (ValidationError, ValueError) as e:
        return Diagnostic(
            kind="invalid_schema",
            message=f"Output does not match the result schema: {e}",
            raw_output=stdout,
        )

    return ParsedOutcome(results=results)


@dataclass(frozen=True, kw_only=True)
class EngineRunner:
    """Runs one assembled program under one engine binary.

    The child process is always waited for. There is no timeout, so a hung
    engine blocks the run.
    """

    suffix: str = ".js"

    def run(
        self, engine: EngineDescriptor, program: AssembledProgram
    ) -> ExecutionOutcome:
        """Execute a program with an engine and classify its output."""
        program_file = tempfile.NamedTemporaryFile(
            "w", suffix=self.suffix, encoding="utf-8", delete=False
        )
        try:
            with program_file:
                program_file.write(program.text)
            log.debug(
                "Running %s on %s (%s)", engine, program.spec_path, program_file.name
            )
            try:
                completed = subprocess.run(
                    [str(engine.executable), program_file.name],
                    capture_output=True,
                    encoding="utf-8",
                    errors="replace",
                    check=False,
                )
            except OSError as e:
                return Diagnostic(
                    kind="launch_error",
                    message=f"Cannot start engine {engine.executable}: {e}",
                )
        finally:
            os.unlink(program_file.name)

        return classify_output(completed.stdout, completed.stderr)


def log_diagnostic(record: RunRecord) -> None:
    """Log a run that produced no usable results."""
    outcome = record.outcome
    if not isinstance(outcome, Diagnostic):
        return
    if outcome.kind == "engine_error":
        log.error(
            "Engine %s failed on %s:\n%s",
            record.engine,
            record.spec_path,
            outcome.message,
        )
    else:
        log.warning(
            "Engine %s produced unusable output for %s (%s): %s\nRaw output:\n%s",
            record.engine,
            record.spec_path,
            outcome.kind,
            outcome.message,
            outcome.raw_output,
        )


def run_all(
    engines: Sequence[EngineDescriptor],
    programs: Sequence[AssembledProgram],
    runner: EngineRunner | None = None,
) -> Sequence[RunRecord]:
    """Run every program under every engine, one engine at a time.

    Args:
        engines: Engines in discovery order
        programs: Programs in spec discovery order
        runner: Runner used for each (engine, program) pair

    Returns:
        One record per pair, engine-major

    """
    runner = runner or EngineRunner()
    records: list[RunRecord] = []

    for engine in engines:
        log.info("Running %d program(s) on %s", len(programs), engine)
        for program in programs:
            record = RunRecord(
                engine=engine,
                spec_path=program.spec_path,
                outcome=runner.run(engine, program),
            )
            log_diagnostic(record)
            records.append(record)

    return records
