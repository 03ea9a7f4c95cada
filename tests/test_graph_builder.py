from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from contract.errors import ModuleSyntaxError, ReadError
from graph import build_graph
from graph.builder import GraphBuilder
from graph.models import DependencyGraph, ModuleRecord

if TYPE_CHECKING:
    from pathlib import Path


def _write_modules(root: Path, modules: dict[str, str]) -> None:
    for name, source in modules.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")


def _write_diamond(root: Path) -> None:
    _write_modules(
        root,
        {
            "entry.js": (
                "import {x} from './x.js';\n"
                "import {y} from './y.js';\n"
                "console.log(x + y);\n"
            ),
            "x.js": "import {z} from './z.js';\nexport const x = z;\n",
            "y.js": "import {z} from './z.js';\nexport const y = z;\n",
            "z.js": "console.log('z');\nexport const z = 1;\n",
        },
    )


def test_round_trip_two_modules(tmp_path: Path) -> None:
    _write_modules(
        tmp_path,
        {
            "a.js": "import {f} from './b.js';\nf();\n",
            "b.js": "export function f() { console.log('f'); }\n",
        },
    )

    graph = build_graph(tmp_path / "a.js")

    assert len(graph) == 2
    a, b = graph.modules
    assert a.path == (tmp_path / "a.js").as_posix()
    assert b.path == (tmp_path / "b.js").as_posix()
    assert a.mapping == {"./b.js": b.identifier}
    assert b.mapping == {}


def test_entry_is_first_with_identifier_zero(tmp_path: Path) -> None:
    _write_diamond(tmp_path)

    graph = build_graph(tmp_path / "entry.js")

    assert graph.entry is graph.modules[0]
    assert graph.entry.identifier == 0
    assert graph.entry.path.endswith("/entry.js")


def test_diamond_yields_independent_records(tmp_path: Path) -> None:
    _write_diamond(tmp_path)

    graph = build_graph(tmp_path / "entry.js")

    names = [module.path.rsplit("/", 1)[-1] for module in graph]
    assert names == ["entry.js", "x.js", "y.js", "z.js", "z.js"]
    z_records = [module for module in graph if module.path.endswith("/z.js")]
    assert z_records[0].identifier != z_records[1].identifier
    x, y = graph.modules[1], graph.modules[2]
    assert x.mapping == {"./z.js": z_records[0].identifier}
    assert y.mapping == {"./z.js": z_records[1].identifier}
    assert graph.get(y.mapping["./z.js"]) is z_records[1]


def test_identifiers_contiguous_in_discovery_order(tmp_path: Path) -> None:
    _write_diamond(tmp_path)

    graph = build_graph(tmp_path / "entry.js")

    assert [module.identifier for module in graph] == list(range(len(graph)))


def test_mapping_values_are_closed_over_graph(tmp_path: Path) -> None:
    _write_diamond(tmp_path)

    graph = build_graph(tmp_path / "entry.js")

    identifiers = {module.identifier for module in graph}
    for module in graph:
        assert set(module.mapping) == set(module.dependency_specifiers)
        assert set(module.mapping.values()) <= identifiers


def test_breadth_first_order(tmp_path: Path) -> None:
    _write_modules(
        tmp_path,
        {
            "entry.js": "import './a.js';\nimport './b.js';\n",
            "a.js": "import './a1.js';\n",
            "b.js": "import './b1.js';\n",
            "a1.js": "",
            "b1.js": "",
        },
    )

    graph = build_graph(tmp_path / "entry.js")

    names = [module.path.rsplit("/", 1)[-1] for module in graph]
    assert names == ["entry.js", "a.js", "b.js", "a1.js", "b1.js"]


def test_specifiers_resolve_against_importer_directory(tmp_path: Path) -> None:
    _write_modules(
        tmp_path,
        {
            "src/entry.js": "import {util} from '../lib/util.js';\nutil();\n",
            "lib/util.js": (
                "import {help} from './helpers/help.js';\n"
                "export const util = help;\n"
            ),
            "lib/helpers/help.js": "export function help() {}\n",
        },
    )

    graph = build_graph(tmp_path / "src" / "entry.js")

    assert [module.path for module in graph] == [
        (tmp_path / "src" / "entry.js").as_posix(),
        (tmp_path / "lib" / "util.js").as_posix(),
        (tmp_path / "lib" / "helpers" / "help.js").as_posix(),
    ]


def test_counter_resets_between_builds(tmp_path: Path) -> None:
    _write_diamond(tmp_path)
    builder = GraphBuilder()

    first = builder.build(tmp_path / "entry.js")
    second = builder.build(tmp_path / "entry.js")

    assert [m.identifier for m in first] == [m.identifier for m in second]
    assert second.entry.identifier == 0


def test_missing_dependency_raises_read_error(tmp_path: Path) -> None:
    _write_modules(tmp_path, {"entry.js": "import './missing.js';\n"})

    with pytest.raises(ReadError) as exc_info:
        build_graph(tmp_path / "entry.js")

    assert exc_info.value.path == (tmp_path / "missing.js").as_posix()


def test_no_extension_inference(tmp_path: Path) -> None:
    _write_modules(
        tmp_path,
        {
            "entry.js": "import {f} from './b';\nf();\n",
            "b.js": "export function f() {}\n",
        },
    )

    with pytest.raises(ReadError) as exc_info:
        build_graph(tmp_path / "entry.js")

    assert exc_info.value.path == (tmp_path / "b").as_posix()


def test_syntax_error_in_dependency_aborts_build(tmp_path: Path) -> None:
    _write_modules(
        tmp_path,
        {
            "entry.js": "import {f} from './b.js';\nf();\n",
            "b.js": "export const s = 'unterminated;\n",
        },
    )

    with pytest.raises(ModuleSyntaxError) as exc_info:
        build_graph(tmp_path / "entry.js")

    assert exc_info.value.path == (tmp_path / "b.js").as_posix()


def test_records_are_frozen_except_mapping(tmp_path: Path) -> None:
    _write_modules(tmp_path, {"entry.js": "console.log(1);\n"})
    record = build_graph(tmp_path / "entry.js").entry

    with pytest.raises(ValidationError):
        record.code = "changed"  # type: ignore[misc]


def test_graph_rejects_dangling_mapping() -> None:
    entry = ModuleRecord(
        identifier=0,
        path="/virtual/a.js",
        code="",
        dependency_specifiers=["./b.js"],
        mapping={"./b.js": 3},
    )

    with pytest.raises(ValidationError, match="points outside the graph"):
        DependencyGraph(modules=[entry])


def test_graph_rejects_duplicate_identifiers() -> None:
    first = ModuleRecord(identifier=0, path="/virtual/a.js", code="")
    second = ModuleRecord(identifier=0, path="/virtual/b.js", code="")

    with pytest.raises(ValidationError, match="unique"):
        DependencyGraph(modules=[first, second])


def test_graph_rejects_incomplete_mapping() -> None:
    entry = ModuleRecord(
        identifier=0,
        path="/virtual/a.js",
        code="",
        dependency_specifiers=["./b.js"],
    )

    with pytest.raises(ValidationError, match="does not cover"):
        DependencyGraph(modules=[entry])
