"""Artifact writing entry points."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from artifacts.write import BuildResult
    from settings.config import BundlerConfig


def write_artifacts(
    *,
    root: Path,
    entry: str | None = None,
    out_path: Path | None = None,
    manifest_path: Path | None = None,
    config: BundlerConfig | None = None,
) -> BuildResult:
    """Write artifacts via lazy import to avoid package import cycles."""
    from artifacts.write import write_artifacts as _write_artifacts

    return _write_artifacts(
        root=root,
        entry=entry,
        out_path=out_path,
        manifest_path=manifest_path,
        config=config,
    )


__all__ = ["write_artifacts"]
