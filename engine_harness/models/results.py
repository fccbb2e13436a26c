"""Models for engine execution results."""

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import Field

from engine_harness.models.base import Model
from engine_harness.models.engine import EngineDescriptor

RESULT_SCHEMA_VERSION = 1

DiagnosticKind = Literal[
    "engine_error",
    "malformed_output",
    "invalid_schema",
    "launch_error",
]


class FailedExpectation(Model):
    """A single failed assertion reported by the test framework."""

    message: str = ""


class SpecResult(Model):
    """Outcome of one spec as reported by the in-engine reporter."""

    full_name: str = Field(..., alias="fullName")
    status: str
    failed_expectations: Sequence[FailedExpectation] = Field(
        default_factory=list, alias="failedExpectations"
    )

    @property
    def is_failure(self) -> bool:
        """Only an exact "failed" status counts as a failure."""
        return self.status == "failed"


class ResultEnvelope(Model):
    """Versioned wrapper around a result array."""

    version: int
    results: Sequence[SpecResult]


@dataclass(frozen=True, kw_only=True)
class Diagnostic:
    """An (engine, program) run that produced no usable results."""

    kind: DiagnosticKind
    message: str
    raw_output: str = ""


@dataclass(frozen=True, kw_only=True)
class ParsedOutcome:
    """An (engine, program) run whose output matched the result schema."""

    results: Sequence[SpecResult]


ExecutionOutcome = Diagnostic | ParsedOutcome


@dataclass(frozen=True, kw_only=True)
class RunRecord:
    """Outcome of one engine run, attributed to its engine and spec file."""

    engine: EngineDescriptor
    spec_path: Path
    outcome: ExecutionOutcome


@dataclass(frozen=True, kw_only=True)
class FailureRecord:
    """A failed spec retained for the failure section of the report."""

    engine: EngineDescriptor
    spec_path: Path
    result: SpecResult
