"""Rewrite passes that make foreign test source embeddable.

The target engines have no module loader and no ``window`` global. Each
pass parses the source, collects the character ranges it needs to change
and splices the original text, so code outside those ranges is preserved
byte for byte.
"""

import logging
import re
from collections.abc import Iterator
from pathlib import Path

import esprima
from esprima.error_handler import Error as EsprimaError
from esprima.nodes import Node

from engine_harness.errors import SourceParseError

log = logging.getLogger(__name__)

WINDOW = "window"
GLOBAL_THIS = "globalThis"

_TRAILING_BLANK = re.compile(r"[ \t]*(?:\r?\n)?")
_LABEL_PARENTS = frozenset(
    {"LabeledStatement", "BreakStatement", "ContinueStatement"}
)
_KEYED_PARENTS = frozenset({"Property", "MethodDefinition"})

Replacement = tuple[int, int, str]


def parse(source: str, path: Path | None = None) -> Node:
    """Parse source into a syntax tree with character ranges."""
    try:
        return esprima.parseModule(source, range=True)
    except EsprimaError as e:
        raise SourceParseError(str(e), path) from e


def iter_children(node: Node) -> Iterator[tuple[str, Node]]:
    """Yield (field, child) pairs for every child node."""
    for field, value in vars(node).items():
        if isinstance(value, Node):
            yield field, value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    yield field, item


def splice(source: str, replacements: list[Replacement]) -> str:
    """Apply non-overlapping (start, end, text) replacements to source."""
    parts: list[str] = []
    cursor = 0
    for start, end, text in sorted(replacements):
        parts.append(source[cursor:start])
        parts.append(text)
        cursor = end
    parts.append(source[cursor:])
    return "".join(parts)


def _is_name_position(parent: Node | None, field: str) -> bool:
    """Check whether an identifier names a property or label, not a binding."""
    if parent is None:
        return False
    if parent.type == "MemberExpression":
        return field == "property" and not parent.computed
    if parent.type in _KEYED_PARENTS:
        return field == "key" and not parent.computed
    return parent.type in _LABEL_PARENTS and field == "label"


def _window_replacements(tree: Node) -> list[Replacement]:
    replacements: dict[tuple[int, int], str] = {}
    stack: list[tuple[Node, Node | None, str]] = [(tree, None, "")]

    # Explicit stack: long left-deep operator chains exceed the recursion limit.
    while stack:
        node, parent, field = stack.pop()
        if (
            node.type == "Property"
            and node.shorthand
            and node.key.type == "Identifier"
            and node.key.name == WINDOW
        ):
            # {window} keeps its key and only the value is renamed. The value
            # shares the key's range, so the identifier below is skipped.
            start, end = node.key.range
            replacements[(start, end)] = f"{WINDOW}: {GLOBAL_THIS}"
        elif (
            node.type == "Identifier"
            and node.name == WINDOW
            and not _is_name_position(parent, field)
        ):
            start, end = node.range
            replacements.setdefault((start, end), GLOBAL_THIS)

        stack.extend(
            (child, node, child_field) for child_field, child in iter_children(node)
        )

    return [(start, end, text) for (start, end), text in replacements.items()]


def rename_window_references(source: str, path: Path | None = None) -> str:
    """Rename every ``window`` identifier to ``globalThis``.

    The rename ignores lexical scope: locals and parameters named ``window``
    are renamed too. Property names in member access and object keys are
    not identifiers in binding position and are left alone.

    A shorthand property keeps its key: ``{window}`` becomes
    ``{window: globalThis}`` and the destructuring default
    ``const {window = 1} = o`` becomes ``const {window: globalThis = 1} = o``.
    """
    replacements = _window_replacements(parse(source, path))
    if replacements:
        log.debug("Renamed %d window reference(s) in %s", len(replacements), path)
    return splice(source, replacements)


def strip_import_declarations(source: str, path: Path | None = None) -> str:
    """Remove every top-level import declaration."""
    tree = parse(source, path)
    replacements: list[Replacement] = []
    for statement in tree.body:
        if statement.type != "ImportDeclaration":
            continue
        start, end = statement.range
        trailing = _TRAILING_BLANK.match(source, end)
        if trailing is not None:
            end = trailing.end()
        replacements.append((start, end, ""))
    if replacements:
        log.debug("Stripped %d import declaration(s) from %s", len(replacements), path)
    return splice(source, replacements)


def preprocess(source: str, path: Path | None = None) -> str:
    """Make spec source embeddable as plain, concatenable script."""
    return rename_window_references(strip_import_declarations(source, path), path)
