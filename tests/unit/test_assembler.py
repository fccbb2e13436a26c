"""Tests for program assembly."""

from pathlib import Path

import pytest

from engine_harness.assembler import (
    assemble,
    discover_spec_files,
    prepare_programs,
)
from engine_harness.errors import SourceParseError, SourceReadError
from engine_harness.models.program import FRAGMENT_ORDER, FragmentSet


@pytest.fixture
def fragments() -> FragmentSet:
    """Create a fragment set where each fragment names its role."""
    return FragmentSet(
        environment="/* environment */\n",
        framework="/* framework */",
        expect="/* expect */",
        reporter="/* reporter */",
        library="/* library */",
        executor="\n/* executor */",
    )


class TestAssemble:
    """Tests for assemble."""

    def test_orders_fragments_canonically(self, fragments: FragmentSet) -> None:
        """Joins fragments in canonical order separated by blank lines."""
        program = assemble(fragments, Path("a.spec.js"), "/* spec */")

        assert program.text == "\n\n".join(
            f"/* {role} */" for role in FRAGMENT_ORDER
        )
        assert program.spec_path == Path("a.spec.js")

    def test_executor_is_last(self, fragments: FragmentSet) -> None:
        """Places the executor after every other fragment."""
        program = assemble(fragments, Path("a.spec.js"), "/* spec */")

        assert program.text.endswith("/* executor */")
        assert program.text.index("/* spec */") < program.text.index("/* executor */")

    def test_only_spec_varies(self, fragments: FragmentSet) -> None:
        """Programs for different specs differ only in the spec fragment."""
        first = assemble(fragments, Path("a.spec.js"), "one();")
        second = assemble(fragments, Path("b.spec.js"), "two();")

        assert first.text.replace("one();", "two();") == second.text


class TestDiscoverSpecFiles:
    """Tests for discover_spec_files."""

    def test_returns_sorted_matches(self, tmp_path: Path) -> None:
        """Returns matching files in path order."""
        for name in ("b.spec.js", "a.spec.js", "helper.js"):
            (tmp_path / name).write_text("")
        (tmp_path / "dir.spec.js").mkdir()

        result = discover_spec_files(tmp_path, "*.spec.js")

        assert result == [tmp_path / "a.spec.js", tmp_path / "b.spec.js"]

    def test_returns_empty_for_missing_root(self, tmp_path: Path) -> None:
        """Returns no files when the root does not exist."""
        assert discover_spec_files(tmp_path / "missing", "*.spec.js") == []


class TestPreparePrograms:
    """Tests for prepare_programs."""

    async def test_prepares_one_program_per_file(
        self, tmp_path: Path, fragments: FragmentSet
    ) -> None:
        """Preprocesses each spec and keeps discovery order."""
        first = tmp_path / "a.spec.js"
        second = tmp_path / "b.spec.js"
        first.write_text("import x from 'y';\nwindow.a = 1;\n")
        second.write_text("const b = 2;\n")

        programs = await prepare_programs(fragments, [first, second])

        assert [program.spec_path for program in programs] == [first, second]
        assert "globalThis.a = 1;" in programs[0].text
        assert "import" not in programs[0].text
        assert "const b = 2;" in programs[1].text

    async def test_parse_error_aborts(
        self, tmp_path: Path, fragments: FragmentSet
    ) -> None:
        """Propagates parse errors for malformed spec source."""
        bad = tmp_path / "bad.spec.js"
        bad.write_text("describe(')\n")

        with pytest.raises(SourceParseError):
            await prepare_programs(fragments, [bad])

    async def test_undecodable_spec_raises_read_error(
        self, tmp_path: Path, fragments: FragmentSet
    ) -> None:
        """Raises SourceReadError for a spec that is not UTF-8."""
        bad = tmp_path / "latin1.spec.js"
        bad.write_bytes(b"it('\xe9');\n")

        with pytest.raises(SourceReadError, match="latin1.spec.js"):
            await prepare_programs(fragments, [bad])
