from __future__ import annotations

from itertools import count
from typing import TYPE_CHECKING

import pytest

from contract.errors import ModuleSyntaxError, ReadError
from parse import parse_module

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


def _allocator(start: int = 0) -> Callable[[], int]:
    ids = count(start)
    return lambda: next(ids)


def _write_module(root: Path, name: str, source: str) -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(source, encoding="utf-8")
    return path


def test_specifiers_collected_in_source_order(tmp_path: Path) -> None:
    path = _write_module(
        tmp_path,
        "a.js",
        "import x from './x.js';\n"
        'import {y} from "./y.js";\n'
        "import './side.js';\n"
        "export {z} from './z.js';\n"
        "export * from './w.js';\n"
        "console.log(x, y);\n",
    )

    record = parse_module(path, _allocator())

    assert record.dependency_specifiers == [
        "./x.js",
        "./y.js",
        "./side.js",
        "./z.js",
        "./w.js",
    ]
    assert record.mapping == {}


def test_specifier_escape_sequences_are_decoded(tmp_path: Path) -> None:
    path = _write_module(
        tmp_path,
        "a.js",
        "import './a\\x2ejs';\n"
        "import './b\\u002ejs';\n"
        "import './c\\u{2e}js';\n"
        "import \"./it\\'s.js\";\n",
    )

    record = parse_module(path, _allocator())

    assert record.dependency_specifiers == ["./a.js", "./b.js", "./c.js", "./it's.js"]


def test_dynamic_import_is_not_a_dependency(tmp_path: Path) -> None:
    path = _write_module(
        tmp_path,
        "a.js",
        "const lazy = import('./lazy.js');\nif (lazy) { console.log(1); }\n",
    )

    record = parse_module(path, _allocator())

    assert record.dependency_specifiers == []


def test_identifier_comes_from_allocator(tmp_path: Path) -> None:
    path = _write_module(tmp_path, "a.js", "export const a = 1;\n")

    record = parse_module(path, _allocator(7))

    assert record.identifier == 7


def test_path_is_absolute_and_normalized(tmp_path: Path) -> None:
    _write_module(tmp_path, "lib/a.js", "export const a = 1;\n")

    record = parse_module(tmp_path / "src" / ".." / "lib" / "a.js", _allocator())

    assert record.path == (tmp_path / "lib" / "a.js").as_posix()


def test_code_has_no_module_syntax(tmp_path: Path) -> None:
    path = _write_module(
        tmp_path,
        "a.js",
        "import {f} from './b.js';\nexport const g = () => f();\n",
    )

    record = parse_module(path, _allocator())

    assert 'require("./b.js")' in record.code
    assert "get: function () { return g; }" in record.code
    assert "import {" not in record.code
    assert "export const" not in record.code


def test_missing_file_raises_read_error(tmp_path: Path) -> None:
    missing = tmp_path / "missing.js"

    with pytest.raises(ReadError) as exc_info:
        parse_module(missing, _allocator())

    assert exc_info.value.path == missing.as_posix()
    assert "cannot read module" in exc_info.value.message


def test_directory_raises_read_error(tmp_path: Path) -> None:
    (tmp_path / "pkg").mkdir()

    with pytest.raises(ReadError):
        parse_module(tmp_path / "pkg", _allocator())


def test_invalid_utf8_raises_read_error(tmp_path: Path) -> None:
    path = tmp_path / "latin1.js"
    path.write_bytes(b"const s = '\xff\xfe';\n")

    with pytest.raises(ReadError, match="not valid UTF-8"):
        parse_module(path, _allocator())


def test_unterminated_string_raises_syntax_error(tmp_path: Path) -> None:
    path = _write_module(tmp_path, "broken.js", 'const s = "abc;\nconsole.log(s);\n')

    with pytest.raises(ModuleSyntaxError) as exc_info:
        parse_module(path, _allocator())

    assert exc_info.value.path == path.as_posix()
    assert exc_info.value.line is not None
    assert exc_info.value.location().startswith(path.as_posix())


def test_syntax_error_does_not_allocate_identifier(tmp_path: Path) -> None:
    path = _write_module(tmp_path, "broken.js", "import {f from './b.js';\n")
    calls: list[int] = []

    def allocate() -> int:
        calls.append(len(calls))
        return calls[-1]

    with pytest.raises(ModuleSyntaxError):
        parse_module(path, allocate)

    assert calls == []
