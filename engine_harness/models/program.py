"""Models for program fragments and assembled programs."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

FragmentRole = Literal[
    "environment",
    "framework",
    "expect",
    "reporter",
    "library",
    "spec",
    "executor",
]

FRAGMENT_ORDER: tuple[FragmentRole, ...] = (
    "environment",
    "framework",
    "expect",
    "reporter",
    "library",
    "spec",
    "executor",
)


@dataclass(frozen=True, kw_only=True)
class FragmentSet:
    """The fixed fragments shared by every assembled program.

    Loaded once before assembly. The spec fragment is the only one that
    varies between programs, so it is not part of this set.
    """

    environment: str
    framework: str
    expect: str
    reporter: str
    library: str
    executor: str

    def ordered(self, spec: str) -> tuple[str, ...]:
        """Return fragment texts in canonical order with the spec slotted in."""
        texts = {
            "environment": self.environment,
            "framework": self.framework,
            "expect": self.expect,
            "reporter": self.reporter,
            "library": self.library,
            "spec": spec,
            "executor": self.executor,
        }
        return tuple(texts[role] for role in FRAGMENT_ORDER)


@dataclass(frozen=True, kw_only=True)
class AssembledProgram:
    """A self-contained program for one spec file."""

    spec_path: Path
    text: str
