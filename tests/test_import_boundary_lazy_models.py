from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

_SRC = Path(__file__).parent.parent / "src"


def _modules_loaded_by(statement: str) -> set[str]:
    env = {**os.environ, "PYTHONPATH": str(_SRC)}
    completed = subprocess.run(
        [
            sys.executable,
            "-c",
            f"import sys; {statement}; print('\\n'.join(sorted(sys.modules)))",
        ],
        capture_output=True,
        text=True,
        check=True,
        env=env,
    )
    return set(completed.stdout.splitlines())


def test_contract_import_does_not_load_parser() -> None:
    loaded = _modules_loaded_by("import contract")

    assert "tree_sitter" not in loaded
    assert "graph.builder" not in loaded


def test_contract_models_resolve_lazily() -> None:
    loaded = _modules_loaded_by("from contract import ModuleRecord")

    assert "graph.models" in loaded
    assert "parse.modules" not in loaded
