"""Construction of one self-contained program per spec file."""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

from engine_harness.errors import SourceReadError
from engine_harness.models.program import AssembledProgram, FragmentSet
from engine_harness.preprocess import preprocess

log = logging.getLogger(__name__)

FRAGMENT_SEPARATOR = "\n\n"


def discover_spec_files(root: Path, pattern: str) -> Sequence[Path]:
    """Find spec files under root matching a glob pattern, sorted by path."""
    files = sorted(path for path in root.glob(pattern) if path.is_file())
    log.info("Discovered %d spec file(s) in %s", len(files), root)
    return files


def assemble(
    fragments: FragmentSet, spec_path: Path, spec_source: str
) -> AssembledProgram:
    """Concatenate the fixed fragments around an already preprocessed spec.

    Fragments are joined with a blank line, so each one can rely on the
    globals established by the fragments before it.
    """
    text = FRAGMENT_SEPARATOR.join(
        fragment.strip() for fragment in fragments.ordered(spec_source)
    )
    return AssembledProgram(spec_path=spec_path, text=text)


async def read_source(path: Path) -> str:
    """Read a UTF-8 source file without blocking the event loop.

    Raises:
        SourceReadError: If the file is missing or not valid UTF-8

    """
    try:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(f"Cannot read {path}: {e}") from e


async def prepare_program(
    fragments: FragmentSet, spec_path: Path
) -> AssembledProgram:
    """Read, preprocess and assemble a single spec file."""
    source = await read_source(spec_path)
    return assemble(fragments, spec_path, preprocess(source, spec_path))


async def prepare_programs(
    fragments: FragmentSet, spec_files: Sequence[Path]
) -> Sequence[AssembledProgram]:
    """Assemble one program per spec file, preserving discovery order.

    Raises:
        SourceParseError: If any spec file is not valid script source
        SourceReadError: If any spec file cannot be read

    """
    programs = await asyncio.gather(
        *(prepare_program(fragments, spec_path) for spec_path in spec_files)
    )
    log.info("Assembled %d program(s)", len(programs))
    return programs
