"""Rewrite ES module syntax into CommonJS bindings.

The rewritten module expects three bindings from its wrapper: ``require``,
``module`` and ``exports``. All ``require`` calls move into a prelude, in
source order, so every dependency runs before the first statement of the
module body. Removed ``import``/``export`` statements leave their line
breaks behind, so body lines are shifted only by the prelude.

Bindings stay live in both directions. Exports are getters on ``exports``
and imported names are read as members of the required module at each use.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import orjson

from contract.errors import TransformError
from parse.treesitter_js import node_text, string_value
from transform.bindings import declared_names, find_references
from transform.profile import TargetProfile

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_WORD = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")
_NON_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_$]")

USE_STRICT = '"use strict";'
ES_MODULE_MARKER = 'Object.defineProperty(exports, "__esModule", { value: true });'
INTEROP_HELPER_NAME = "_interopRequireDefault"
INTEROP_HELPER = (
    f"function {INTEROP_HELPER_NAME}(obj) "
    "{ return obj && obj.__esModule ? obj : { default: obj }; }"
)


def _js_string(value: str) -> str:
    return orjson.dumps(value).decode("utf8")


def _member(obj: str, name: str) -> str:
    if _IDENTIFIER.match(name):
        return f"{obj}.{name}"
    return f"{obj}[{_js_string(name)}]"


def _export_getter(exported: str, target: str) -> str:
    return (
        f"Object.defineProperty(exports, {_js_string(exported)}, "
        f"{{ enumerable: true, get: function () {{ return {target}; }} }});"
    )


def _star_export(module_var: str) -> str:
    return (
        f"Object.keys({module_var}).forEach(function (key) {{ "
        'if (key === "default" || key === "__esModule") return; '
        "if (Object.prototype.hasOwnProperty.call(exports, key)) return; "
        "Object.defineProperty(exports, key, "
        f"{{ enumerable: true, get: function () {{ return {module_var}[key]; }} }}); }});"
    )


def _export_name(node: Node) -> str:
    """Name used in an import/export specifier (identifier or string)."""
    if node.type == "string":
        return string_value(node)
    return node_text(node)


def _child_of_type(node: Node, node_type: str) -> Node | None:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


@dataclass(frozen=True)
class ImportBinding:
    """A local name bound by an import declaration."""

    local_name: str
    module_var: str
    imported_name: str

    @property
    def expression(self) -> str:
        return _member(self.module_var, self.imported_name)


class _ModuleRewriter:
    """Collects byte-range edits for one module and assembles the result."""

    def __init__(
        self,
        tree: Tree,
        source_bytes: bytes,
        path: str,
        profile: TargetProfile,
    ) -> None:
        self._tree = tree
        self._source = source_bytes
        self._path = path
        self._profile = profile
        self._used_names = set(_WORD.findall(source_bytes.decode("utf8")))
        self._edits: list[tuple[int, int, str]] = []
        self._bindings: dict[str, ImportBinding] = {}
        self._requires: list[str] = []
        self._exports: list[tuple[str, str]] = []
        self._has_exports = False
        self._needs_interop = False

    def rewrite(self) -> str:
        body_roots: list[Node] = []
        for statement in self._tree.root_node.children:
            if statement.type == "import_statement":
                self._rewrite_import(statement)
            elif statement.type == "export_statement":
                self._has_exports = True
                body_roots.extend(self._rewrite_export(statement))
            elif statement.type == "hash_bang_line":
                self._replace(statement, "")
            else:
                body_roots.append(statement)

        self._rewrite_references(body_roots)
        body = self._apply_edits()

        prelude = self._prelude()
        if not prelude:
            return body
        return "\n".join(prelude) + "\n" + body

    def _prelude(self) -> list[str]:
        lines: list[str] = []
        if self._profile.strict_mode:
            lines.append(USE_STRICT)
        if self._has_exports and self._profile.es_module_marker:
            lines.append(ES_MODULE_MARKER)
        if self._needs_interop:
            lines.append(INTEROP_HELPER)
        for exported, target in self._exports:
            binding = self._bindings.get(target)
            lines.append(_export_getter(exported, binding.expression if binding else target))
        lines.extend(self._requires)
        return lines

    def _fail(self, node: Node, message: str) -> TransformError:
        return TransformError(
            self._path,
            message,
            line=node.start_point[0] + 1,
            column=node.start_point[1] + 1,
        )

    def _replace(self, node: Node, text: str) -> None:
        self._edits.append((node.start_byte, node.end_byte, text))

    def _replace_range(self, start: int, end: int, text: str) -> None:
        self._edits.append((start, end, text))

    def _blank(self, node: Node) -> None:
        self._replace(node, "\n" * node_text(node).count("\n"))

    def _apply_edits(self) -> str:
        result = self._source
        for start, end, text in sorted(self._edits, reverse=True):
            result = result[:start] + text.encode("utf8") + result[end:]
        return result.decode("utf8")

    def _temp_name(self, specifier: str) -> str:
        base = specifier.rstrip("/").rsplit("/", 1)[-1].split(".", 1)[0]
        base = _NON_IDENTIFIER_CHARS.sub("_", base) or "module"
        candidate = f"_{base}"
        suffix = 2
        while candidate in self._used_names:
            candidate = f"_{base}{suffix}"
            suffix += 1
        self._used_names.add(candidate)
        return candidate

    def _bind(self, local: str, module_var: str, imported: str) -> None:
        self._bindings[local] = ImportBinding(local, module_var, imported)

    def _rewrite_import(self, node: Node) -> None:
        source = node.child_by_field_name("source")
        if source is None:
            raise self._fail(node, "import declaration without a source")
        specifier = string_value(source)
        require_call = f"require({_js_string(specifier)})"
        self._blank(node)

        clause = _child_of_type(node, "import_clause")
        if clause is None:
            self._requires.append(f"{require_call};")
            return

        default_names: list[str] = []
        namespace_name: str | None = None
        named: list[tuple[str, str]] = []
        for child in clause.named_children:
            if child.type == "identifier":
                default_names.append(node_text(child))
            elif child.type == "namespace_import":
                identifiers = [c for c in child.named_children if c.type == "identifier"]
                if not identifiers:
                    raise self._fail(child, "namespace import without a name")
                namespace_name = node_text(identifiers[-1])
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name_node = spec.child_by_field_name("name")
                    if name_node is None:
                        raise self._fail(spec, "import specifier without a name")
                    alias_node = spec.child_by_field_name("alias")
                    imported = _export_name(name_node)
                    local = node_text(alias_node) if alias_node else imported
                    if imported == "default":
                        default_names.append(local)
                    else:
                        named.append((imported, local))
            elif child.type != "comment":
                raise self._fail(child, f"unsupported import clause {child.type!r}")

        module_var = namespace_name or self._temp_name(specifier)
        statements = [f"var {module_var} = {require_call};"]
        if default_names:
            default_var = module_var
            if self._profile.interop_default:
                self._needs_interop = True
                default_var = self._temp_name(specifier)
                statements.append(
                    f"var {default_var} = {INTEROP_HELPER_NAME}({module_var});"
                )
            for local in default_names:
                self._bind(local, default_var, "default")
        for imported, local in named:
            self._bind(local, module_var, imported)
        self._requires.append(" ".join(statements))

    def _rewrite_references(self, roots: list[Node]) -> None:
        if not self._bindings:
            return
        for reference in find_references(roots, frozenset(self._bindings)):
            expression = self._bindings[reference.name].expression
            if reference.kind == "callee":
                text = f"(0, {expression})"
            elif reference.kind == "shorthand":
                text = f"{reference.name}: {expression}"
            else:
                text = expression
            self._replace(reference.node, text)

    def _rewrite_export(self, node: Node) -> list[Node]:
        """Rewrite one export statement; return the parts that stay in the body."""
        source = node.child_by_field_name("source")
        if source is not None:
            self._rewrite_reexport(node, string_value(source))
            return []

        declaration = node.child_by_field_name("declaration")
        value = node.child_by_field_name("value")
        if _child_of_type(node, "default") is not None:
            if declaration is not None:
                names = declared_names(declaration)
                if not names:
                    raise self._fail(declaration, "default declaration without a name")
                self._exports.append(("default", names[0]))
                self._replace_range(node.start_byte, declaration.start_byte, "")
                return [declaration]
            if value is not None:
                self._replace_range(node.start_byte, value.start_byte, "exports.default = ")
                if not node_text(node).rstrip().endswith(";"):
                    self._replace_range(node.end_byte, node.end_byte, ";")
                return [value]
            raise self._fail(node, "default export without a value")

        if declaration is not None:
            self._exports.extend((name, name) for name in declared_names(declaration))
            self._replace_range(node.start_byte, declaration.start_byte, "")
            return [declaration]

        clause = _child_of_type(node, "export_clause")
        if clause is None:
            raise self._fail(node, "unsupported export statement")
        self._exports.extend(self._export_specifiers(clause))
        self._blank(node)
        return []

    def _export_specifiers(self, clause: Node) -> list[tuple[str, str]]:
        """(exported name, local or imported name) pairs of an export clause."""
        pairs: list[tuple[str, str]] = []
        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                raise self._fail(spec, "export specifier without a name")
            alias_node = spec.child_by_field_name("alias")
            local = _export_name(name_node)
            exported = _export_name(alias_node) if alias_node else local
            pairs.append((exported, local))
        return pairs

    def _rewrite_reexport(self, node: Node, specifier: str) -> None:
        module_var = self._temp_name(specifier)
        statements = [f"var {module_var} = require({_js_string(specifier)});"]
        self._blank(node)

        namespace = _child_of_type(node, "namespace_export")
        if namespace is not None:
            names = [c for c in namespace.named_children if c.type != "comment"]
            if not names:
                raise self._fail(namespace, "namespace export without a name")
            self._exports.append((_export_name(names[-1]), module_var))
        else:
            clause = _child_of_type(node, "export_clause")
            if clause is not None:
                for exported, imported in self._export_specifiers(clause):
                    self._exports.append((exported, _member(module_var, imported)))
            else:
                statements.append(_star_export(module_var))
        self._requires.append(" ".join(statements))


def transform_module(
    tree: Tree,
    source_bytes: bytes,
    path: str,
    profile: TargetProfile | None = None,
) -> str:
    """Rewrite one parsed module into code for a CommonJS-style wrapper.

    Args:
        tree: Syntax tree of ``source_bytes`` (already checked for errors)
        source_bytes: UTF-8 module source
        path: Module path, used for error reporting
        profile: Target environment profile (default profile when omitted)

    Returns:
        Module code without ``import``/``export`` statements.

    Raises:
        TransformError: If a module statement has an unsupported shape.
    """
    rewriter = _ModuleRewriter(tree, source_bytes, path, profile or TargetProfile())
    return rewriter.rewrite()


__all__ = [
    "ES_MODULE_MARKER",
    "INTEROP_HELPER",
    "USE_STRICT",
    "ImportBinding",
    "transform_module",
]
