"""Bundle emission: module registry plus a minimal runtime loader.

The artifact is one self-invoking function receiving the registry
``{identifier: [factory, mapping], ...}``. Its ``require`` does not memoize:
every call runs the module factory again with a fresh ``module`` object, so
a module required from two places executes twice.

The loader is plain ES5 so the bundle runs anywhere closures and object
literals do.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson

if TYPE_CHECKING:
    from graph.models import DependencyGraph, ModuleRecord

LOADER_HEAD = """(function (modules) {
  function require(id) {
    var entry = modules[id];
    var fn = entry[0];
    var mapping = entry[1];

    function localRequire(name) {
      return require(mapping[name]);
    }

    var module = { exports: {} };

    fn(localRequire, module, module.exports);

    return module.exports;
  }

  require("""

LOADER_MIDDLE = """);
})({
"""

LOADER_TAIL = "});\n"


def _emit_mapping(module: ModuleRecord) -> str:
    # Insertion order is source order, which keeps the output deterministic.
    return orjson.dumps(module.mapping).decode("utf8")


def _emit_registry_entry(module: ModuleRecord) -> str:
    return (
        f"  {module.identifier}: [\n"
        "    function (require, module, exports) {\n"
        f"{module.code.rstrip()}\n"
        "    },\n"
        f"    {_emit_mapping(module)},\n"
        "  ],\n"
    )


def emit_bundle(graph: DependencyGraph) -> str:
    """Serialize a dependency graph into one executable JavaScript source.

    Pure function of ``graph``: the same graph always yields byte-identical
    output. Execution starts with ``require`` of the entry module.
    """
    registry = "".join(_emit_registry_entry(module) for module in graph.modules)
    return (
        LOADER_HEAD
        + str(graph.entry.identifier)
        + LOADER_MIDDLE
        + registry
        + LOADER_TAIL
    )


__all__ = ["emit_bundle"]
