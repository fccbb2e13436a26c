"""Classification of run records and rendering of the plain-text report."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from engine_harness.models.engine import EngineDescriptor
from engine_harness.models.results import (
    Diagnostic,
    FailureRecord,
    ParsedOutcome,
    RunRecord,
    SpecResult,
)


@dataclass(frozen=True, kw_only=True)
class StatusLine:
    """One reported spec result."""

    engine: EngineDescriptor
    result: SpecResult

    def render(self) -> str:
        return f"({self.engine}) {self.result.full_name}: {self.result.status.upper()}"


@dataclass(frozen=True, kw_only=True)
class DiagnosticRecord:
    """A run excluded from the tallies."""

    engine: EngineDescriptor
    spec_path: Path
    diagnostic: Diagnostic


@dataclass(frozen=True, kw_only=True)
class Report:
    """Aggregated view over every run record."""

    status_lines: Sequence[StatusLine] = field(default_factory=list)
    failures: Sequence[FailureRecord] = field(default_factory=list)
    diagnostics: Sequence[DiagnosticRecord] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for line in self.status_lines if line.result.status == "passed")

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def other(self) -> int:
        return len(self.status_lines) - self.passed - self.failed

    @property
    def has_problems(self) -> bool:
        """Whether the run should complete with a non-zero status."""
        return bool(self.failures or self.diagnostics)


def aggregate(records: Sequence[RunRecord]) -> Report:
    """Collect status lines, failures and diagnostics without mutating input."""
    status_lines: list[StatusLine] = []
    diagnostics: list[DiagnosticRecord] = []

    for record in records:
        match record.outcome:
            case Diagnostic() as diagnostic:
                diagnostics.append(
                    DiagnosticRecord(
                        engine=record.engine,
                        spec_path=record.spec_path,
                        diagnostic=diagnostic,
                    )
                )
            case ParsedOutcome(results=results):
                status_lines.extend(
                    StatusLine(engine=record.engine, result=result)
                    for result in results
                )

    failures = [
        FailureRecord(engine=record.engine, spec_path=record.spec_path, result=result)
        for record in records
        if isinstance(record.outcome, ParsedOutcome)
        for result in record.outcome.results
        if result.is_failure
    ]

    return Report(status_lines=status_lines, failures=failures, diagnostics=diagnostics)


def render_report(report: Report) -> str:
    """Render the two-pass report followed by a one-line summary."""
    lines = [line.render() for line in report.status_lines]

    for failure in report.failures:
        lines.append("")
        lines.append(f"({failure.engine}) {failure.result.full_name} FAILED:")
        lines.extend(
            f"    {expectation.message}"
            for expectation in failure.result.failed_expectations
        )

    if lines:
        lines.append("")
    lines.append(
        f"{report.passed} passed, {report.failed} failed, {report.other} other, "
        f"{len(report.diagnostics)} run(s) excluded"
    )
    return "\n".join(lines)
