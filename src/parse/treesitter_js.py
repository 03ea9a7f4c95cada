"""Tree-sitter JavaScript parsing for minibundle modules."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser
from tree_sitter_javascript import language as get_javascript_language

from contract.errors import ModuleSyntaxError

if TYPE_CHECKING:
    from tree_sitter import Tree

_PARSER: Parser | None = None

# Top-level statements whose ``source`` field names another module.
_MODULE_SOURCE_STATEMENTS = ("import_statement", "export_statement")

_ESCAPE = re.compile(
    r"\\(u\{[0-9A-Fa-f]+\}|u[0-9A-Fa-f]{4}|x[0-9A-Fa-f]{2}|\r\n|[\s\S])"
)
_SIMPLE_ESCAPES = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "0": "\0",
}
_LINE_CONTINUATIONS = frozenset({"\n", "\r", "\r\n", "\u2028", "\u2029"})


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with JavaScript language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_javascript_language())
        _PARSER = Parser(lang)

    return _PARSER


def node_text(node: Node) -> str:
    return node.text.decode("utf8") if node.text else ""


def _decode_escape(match: re.Match[str]) -> str:
    sequence = match.group(1)
    if sequence.startswith("u{"):
        return chr(int(sequence[2:-1], 16))
    if len(sequence) > 1 and sequence[0] in "ux":
        return chr(int(sequence[1:], 16))
    if sequence in _LINE_CONTINUATIONS:
        return ""
    return _SIMPLE_ESCAPES.get(sequence, sequence)


def string_value(node: Node) -> str:
    """Return the literal value of a string node.

    Quotes are stripped and escape sequences decoded, so ``'./a\\x2ejs'``
    yields ``./a.js``.
    """
    text = node_text(node)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "'\"":
        text = text[1:-1]
    value = _ESCAPE.sub(_decode_escape, text)
    if any("\ud800" <= char <= "\udfff" for char in value):
        # Join surrogate pairs written as two \u escapes.
        value = value.encode("utf-16", "surrogatepass").decode("utf-16", "surrogatepass")
    return value


def _first_error_node(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error_node(child)
        if found is not None:
            return found
    return node


def parse_source(source_bytes: bytes, path: str) -> Tree:
    """Parse module source, failing on any syntax error.

    Raises:
        ModuleSyntaxError: with the 1-based line and column of the first
            ``ERROR`` or ``MISSING`` node.
    """
    tree = _get_parser().parse(source_bytes)
    root = tree.root_node
    if root.has_error:
        bad = _first_error_node(root) or root
        line = bad.start_point[0] + 1
        column = bad.start_point[1] + 1
        what = f"missing {bad.type!r}" if bad.is_missing else "unexpected token"
        msg = f"syntax error at line {line}, column {column}: {what}"
        raise ModuleSyntaxError(path, msg, line=line, column=column)
    return tree


def module_source_node(statement: Node) -> Node | None:
    """Return the ``source`` string of an import or re-export statement."""
    if statement.type not in _MODULE_SOURCE_STATEMENTS:
        return None
    return statement.child_by_field_name("source")


def extract_dependency_specifiers(tree: Tree) -> list[str]:
    """Collect static module specifiers in source order.

    Only top-level ``import`` declarations and ``export ... from``
    re-exports are considered; ``import()`` calls are ignored.
    """
    specifiers: list[str] = []
    for statement in tree.root_node.children:
        source = module_source_node(statement)
        if source is not None:
            specifiers.append(string_value(source))
    return specifiers


__all__ = [
    "extract_dependency_specifiers",
    "module_source_node",
    "node_text",
    "parse_source",
    "string_value",
]
