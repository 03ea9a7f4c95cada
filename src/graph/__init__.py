"""Dependency graph models and construction."""

from __future__ import annotations

from typing import TYPE_CHECKING

from graph.models import DependencyGraph, ManifestRecord, ModuleRecord

if TYPE_CHECKING:
    from pathlib import Path

    from transform.profile import TargetProfile


def build_graph(
    entry: str | Path,
    profile: TargetProfile | None = None,
) -> DependencyGraph:
    """Build a graph via lazy import to avoid package import cycles."""
    from graph.builder import build_graph as _build_graph

    return _build_graph(entry, profile)


__all__ = ["DependencyGraph", "ManifestRecord", "ModuleRecord", "build_graph"]
