"""Integration tests for EngineRunner using real subprocesses."""

from pathlib import Path

from engine_harness.models.engine import EngineDescriptor
from engine_harness.models.program import AssembledProgram
from engine_harness.models.results import Diagnostic, ParsedOutcome
from engine_harness.runner import EngineRunner, run_all

from .conftest import MakeEngineFn

RESULTS_PROGRAM = AssembledProgram(
    spec_path=Path("a.spec.js"),
    text='[{"fullName": "echoed", "status": "passed", "failedExpectations": []}]',
)


class TestEngineRunner:
    """Tests for EngineRunner.run."""

    def test_passes_program_file_as_only_argument(
        self, make_engine: MakeEngineFn
    ) -> None:
        """Hands the engine one path whose content is the program text."""
        engine = make_engine(
            "cat-engine",
            '[ "$#" -eq 1 ] || { echo "expected one argument" >&2; exit 1; }\n'
            'cat "$1"',
        )

        outcome = EngineRunner().run(engine, RESULTS_PROGRAM)

        assert isinstance(outcome, ParsedOutcome)
        assert outcome.results[0].full_name == "echoed"

    def test_error_stream_becomes_diagnostic(self, make_engine: MakeEngineFn) -> None:
        """Treats error output as an engine failure even with valid stdout."""
        engine = make_engine("noisy", 'cat "$1"\necho "ReferenceError: x" >&2')

        outcome = EngineRunner().run(engine, RESULTS_PROGRAM)

        assert isinstance(outcome, Diagnostic)
        assert outcome.kind == "engine_error"
        assert "ReferenceError: x" in outcome.message

    def test_non_json_output_becomes_diagnostic(
        self, make_engine: MakeEngineFn
    ) -> None:
        """Keeps the raw output of a run that did not print JSON."""
        engine = make_engine("chatty", "echo hello")

        outcome = EngineRunner().run(engine, RESULTS_PROGRAM)

        assert isinstance(outcome, Diagnostic)
        assert outcome.kind == "malformed_output"
        assert outcome.raw_output == "hello\n"

    def test_uses_fresh_temporary_file_per_run(
        self, make_engine: MakeEngineFn
    ) -> None:
        """Writes each run to its own file and removes it afterwards."""
        engine = make_engine("path-engine", 'echo "$1" >&2')
        runner = EngineRunner()

        first = runner.run(engine, RESULTS_PROGRAM)
        second = runner.run(engine, RESULTS_PROGRAM)

        assert isinstance(first, Diagnostic)
        assert isinstance(second, Diagnostic)
        first_path = Path(first.message.strip())
        second_path = Path(second.message.strip())
        assert first_path != second_path
        assert first_path.suffix == ".js"
        assert not first_path.exists()
        assert not second_path.exists()

    def test_missing_executable(self, tmp_path: Path) -> None:
        """Reports an engine that cannot be started."""
        engine = EngineDescriptor(name="ghost", executable=tmp_path / "ghost")

        outcome = EngineRunner().run(engine, RESULTS_PROGRAM)

        assert isinstance(outcome, Diagnostic)
        assert outcome.kind == "launch_error"


def test_run_all_continues_after_failures(make_engine: MakeEngineFn) -> None:
    """Runs every pair even when some engines fail."""
    broken = make_engine("broken", "echo crash >&2")
    working = make_engine("working", 'cat "$1"')
    programs = [
        RESULTS_PROGRAM,
        AssembledProgram(spec_path=Path("b.spec.js"), text=RESULTS_PROGRAM.text),
    ]

    records = run_all([broken, working], programs)

    assert [type(r.outcome) for r in records] == [
        Diagnostic,
        Diagnostic,
        ParsedOutcome,
        ParsedOutcome,
    ]


def test_undecodable_output_does_not_abort(make_engine: MakeEngineFn) -> None:
    """Reports output that is not UTF-8 and still runs the next engine."""
    garbled = make_engine("garbled", r"printf '\377\376 garbage'")
    working = make_engine("working", "echo '[]'")

    records = run_all([garbled, working], [RESULTS_PROGRAM])

    assert [r.engine.name for r in records] == ["garbled", "working"]
    outcome = records[0].outcome
    assert isinstance(outcome, Diagnostic)
    assert outcome.kind == "malformed_output"
    assert outcome.raw_output.endswith(" garbage")
    assert records[1].outcome == ParsedOutcome(results=[])


def test_undecodable_error_stream(make_engine: MakeEngineFn) -> None:
    """Keeps error output that is not UTF-8 as an engine failure."""
    engine = make_engine("garbled-stderr", r"printf '\377 crashed' >&2")

    outcome = EngineRunner().run(engine, RESULTS_PROGRAM)

    assert isinstance(outcome, Diagnostic)
    assert outcome.kind == "engine_error"
    assert "crashed" in outcome.message
