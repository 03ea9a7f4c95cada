"""Determinism verification for minibundle bundles."""

from __future__ import annotations

import filecmp
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from artifacts.utils import _write_text
from artifacts.write import build_bundle

if TYPE_CHECKING:
    from settings.config import BundlerConfig


@dataclass(frozen=True)
class DeterminismResult:
    ok: bool
    bundle_path: str
    module_count: int = 0


def verify_determinism(
    *,
    root: Path,
    bundle_path: Path,
    entry: str | None = None,
    config: BundlerConfig | None = None,
) -> DeterminismResult:
    """Verify that an existing bundle matches a fresh build byte-for-byte.

    Rebuilds the bundle into a temporary directory and compares it with
    ``bundle_path``. Nothing in the project is written.

    Args:
        root: Project root.
        bundle_path: Previously written bundle to check.
        entry: Entry module relative to root (default: config entry).
        config: Configuration (default: loaded from root).

    Returns:
        DeterminismResult with ok status and the number of modules built.

    Raises:
        FileNotFoundError: If bundle_path does not exist.
        IsADirectoryError: If bundle_path is a directory.
    """
    if not bundle_path.exists():
        msg = f"Bundle file does not exist: {bundle_path}"
        raise FileNotFoundError(msg)
    if bundle_path.is_dir():
        msg = f"Bundle path is a directory: {bundle_path}"
        raise IsADirectoryError(msg)

    result = build_bundle(root=root, entry=entry, config=config)

    with tempfile.TemporaryDirectory() as temp_dir:
        regenerated = Path(temp_dir) / bundle_path.name
        _write_text(regenerated, result.source)
        ok = filecmp.cmp(bundle_path, regenerated, shallow=False)

    return DeterminismResult(
        ok=ok,
        bundle_path=str(bundle_path),
        module_count=len(result.graph),
    )


__all__ = ["DeterminismResult", "verify_determinism"]
