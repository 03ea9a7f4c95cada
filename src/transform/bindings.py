"""Scope-aware lookup of references to module-level import bindings.

Imported names are rewritten into member reads on the required module so
that they observe later changes made by the exporting module. A reference
is rewritten only when no enclosing function, block, loop or catch clause
declares a local binding with the same name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from parse.treesitter_js import node_text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tree_sitter import Node

_FUNCTION_TYPES = frozenset(
    {
        "function_declaration",
        "function_expression",
        "function",
        "generator_function_declaration",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

# Named function expressions bind their own name inside themselves.
_SELF_NAMED_TYPES = frozenset({"function_expression", "function", "generator_function"})

_LEXICAL_DECLARATIONS = frozenset(
    {
        "lexical_declaration",
        "class_declaration",
        "function_declaration",
        "generator_function_declaration",
    }
)


@dataclass(frozen=True)
class BindingReference:
    """One occurrence of an imported name that reads the binding."""

    node: Node
    name: str
    kind: str  # "identifier", "callee" or "shorthand"


def pattern_names(node: Node) -> list[str]:
    """Bound identifiers of a declarator name or destructuring pattern."""
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [node_text(node)]

    if node.type == "pair_pattern":
        value = node.child_by_field_name("value")
        return pattern_names(value) if value is not None else []

    if node.type in ("assignment_pattern", "object_assignment_pattern"):
        left = node.child_by_field_name("left")
        return pattern_names(left) if left is not None else []

    if node.type in ("object_pattern", "array_pattern", "rest_pattern"):
        names: list[str] = []
        for child in node.named_children:
            if child.type != "comment":
                names.extend(pattern_names(child))
        return names

    return []


def declared_names(declaration: Node) -> list[str]:
    """Names bound by a variable, function or class declaration."""
    if declaration.type in ("lexical_declaration", "variable_declaration"):
        names: list[str] = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            if name_node is not None:
                names.extend(pattern_names(name_node))
        return names

    name_node = declaration.child_by_field_name("name")
    return [node_text(name_node)] if name_node is not None else []


def _var_names(node: Node) -> list[str]:
    """``var`` names hoisted out of ``node``, not crossing nested functions."""
    names: list[str] = []
    for child in node.named_children:
        if child.type in _FUNCTION_TYPES:
            continue
        if child.type == "variable_declaration":
            names.extend(declared_names(child))
        elif child.type == "for_in_statement" and _loop_kind(child) == "var":
            left = child.child_by_field_name("left")
            if left is not None:
                names.extend(pattern_names(left))
        names.extend(_var_names(child))
    return names


def _loop_kind(node: Node) -> str | None:
    kind = node.child_by_field_name("kind")
    return node_text(kind) if kind is not None else None


def _lexical_names(statements: Iterable[Node]) -> list[str]:
    names: list[str] = []
    for statement in statements:
        if statement.type in _LEXICAL_DECLARATIONS:
            names.extend(declared_names(statement))
    return names


def _function_names(node: Node) -> set[str]:
    names: set[str] = set()
    if node.type in _SELF_NAMED_TYPES:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            names.add(node_text(name_node))

    parameter = node.child_by_field_name("parameter")
    if parameter is not None:
        names.update(pattern_names(parameter))
    parameters = node.child_by_field_name("parameters")
    if parameters is not None:
        for param in parameters.named_children:
            names.update(pattern_names(param))

    body = node.child_by_field_name("body")
    if body is not None and body.type == "statement_block":
        names.update(_var_names(body))
        names.update(_lexical_names(body.named_children))
    return names


def scope_names(node: Node) -> set[str]:
    """Names declared by ``node`` when it opens a scope, else an empty set."""
    if node.type in _FUNCTION_TYPES:
        return _function_names(node)

    if node.type == "statement_block":
        return set(_lexical_names(node.named_children))

    if node.type == "switch_body":
        statements = [
            statement
            for case in node.named_children
            for statement in case.named_children
        ]
        return set(_lexical_names(statements))

    if node.type == "for_statement":
        names: set[str] = set()
        for child in node.named_children:
            if child.type in ("lexical_declaration", "variable_declaration"):
                names.update(declared_names(child))
        return names

    if node.type == "for_in_statement" and _loop_kind(node) is not None:
        left = node.child_by_field_name("left")
        return set(pattern_names(left)) if left is not None else set()

    if node.type == "catch_clause":
        parameter = node.child_by_field_name("parameter")
        return set(pattern_names(parameter)) if parameter is not None else set()

    return set()


def _reference_kind(node: Node) -> str:
    parent = node.parent
    if parent is not None and parent.type == "call_expression":
        callee = parent.child_by_field_name("function")
        if callee is not None and callee == node:
            return "callee"
    return "identifier"


def find_references(
    roots: Iterable[Node], names: frozenset[str]
) -> list[BindingReference]:
    """Find reads of ``names`` below ``roots`` that are not locally shadowed.

    Results are in source order.
    """
    references: list[BindingReference] = []

    def visit(node: Node, shadowed: frozenset[str]) -> None:
        declared = scope_names(node) & names
        if declared:
            shadowed = shadowed | declared
        if node.type == "identifier":
            name = node_text(node)
            if name in names and name not in shadowed:
                references.append(BindingReference(node, name, _reference_kind(node)))
            return
        if node.type == "shorthand_property_identifier":
            name = node_text(node)
            if name in names and name not in shadowed:
                references.append(BindingReference(node, name, "shorthand"))
            return
        for child in node.named_children:
            visit(child, shadowed)

    for root in roots:
        visit(root, frozenset())
    return references


__all__ = [
    "BindingReference",
    "declared_names",
    "find_references",
    "pattern_names",
    "scope_names",
]
