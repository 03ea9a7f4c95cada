from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from artifacts.write import BuildResult
from verify.verify import DeterminismResult, verify_determinism

if TYPE_CHECKING:
    from pathlib import Path


def _write_minimal_project(root: Path) -> None:
    root.mkdir(parents=True, exist_ok=True)
    (root / "entry.js").write_text(
        "import {a} from './a.js';\nconsole.log(a);\n", encoding="utf-8"
    )
    (root / "a.js").write_text("export const a = 1;\n", encoding="utf-8")


def test_verify_determinism_requires_bundle(tmp_path: Path) -> None:
    project = tmp_path / "project"
    _write_minimal_project(project)

    missing = tmp_path / "missing.js"
    with pytest.raises(FileNotFoundError, match="Bundle file does not exist"):
        verify_determinism(root=project, bundle_path=missing, entry="entry.js")


def test_verify_determinism_rejects_directory(tmp_path: Path) -> None:
    project = tmp_path / "project"
    _write_minimal_project(project)

    with pytest.raises(IsADirectoryError):
        verify_determinism(root=project, bundle_path=project, entry="entry.js")


def test_verify_determinism_detects_mismatch(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    project = tmp_path / "project"
    _write_minimal_project(project)
    bundle_path = tmp_path / "bundle.js"
    bundle_path.write_text("original", encoding="utf-8")

    def _fake_build_bundle(**_kwargs: object) -> BuildResult:
        from graph.builder import build_graph

        graph = build_graph(project / "entry.js")
        return BuildResult(graph=graph, source="regenerated")

    monkeypatch.setattr("verify.verify.build_bundle", _fake_build_bundle)

    result = verify_determinism(root=project, bundle_path=bundle_path)

    assert result == DeterminismResult(
        ok=False,
        bundle_path=str(bundle_path),
        module_count=2,
    )


def test_verify_determinism_accepts_fresh_bundle(tmp_path: Path) -> None:
    from artifacts.write import write_artifacts

    project = tmp_path / "project"
    _write_minimal_project(project)
    bundle_path = tmp_path / "bundle.js"
    write_artifacts(root=project, entry="entry.js", out_path=bundle_path)

    result = verify_determinism(root=project, bundle_path=bundle_path, entry="entry.js")

    assert result.ok
    assert result.module_count == 2
