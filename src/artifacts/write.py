from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from artifacts.utils import _dumps_jsonl, _write_jsonl, _write_text
from bundle.emitter import emit_bundle
from graph.builder import GraphBuilder
from graph.models import ManifestRecord
from settings.config import ConfigError, load_config, resolve_output_path
from utils import relative_to_root

if TYPE_CHECKING:
    from pathlib import Path

    from graph.models import DependencyGraph
    from settings.config import BundlerConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildResult:
    graph: DependencyGraph
    source: str
    bundle_path: Path | None = None
    manifest_path: Path | None = None


def resolve_entry(root: Path, entry: str | None, config: BundlerConfig) -> Path:
    """Pick the entry module: explicit argument first, then the config."""
    if entry is not None:
        return root / entry
    if config.entry is None:
        msg = "no entry module given and none configured"
        raise ConfigError(msg)
    return root / config.entry


def manifest_records(
    graph: DependencyGraph,
    root: Path | None = None,
) -> list[ManifestRecord]:
    """Graph manifest records, paths made relative to ``root`` when given."""
    return [
        ManifestRecord.from_module(
            module,
            path=relative_to_root(module.path, root) if root is not None else None,
        )
        for module in graph.modules
    ]


def render_manifest(graph: DependencyGraph, root: Path | None = None) -> str:
    return _dumps_jsonl(manifest_records(graph, root)).decode("utf-8")


def build_bundle(
    *,
    root: Path,
    entry: str | None = None,
    config: BundlerConfig | None = None,
) -> BuildResult:
    """Build the graph and emit the bundle without writing anything."""
    if config is None:
        config = load_config(root)

    entry_path = resolve_entry(root, entry, config)
    graph = GraphBuilder(config.target).build(entry_path)
    return BuildResult(graph=graph, source=emit_bundle(graph))


def write_artifacts(
    *,
    root: Path,
    entry: str | None = None,
    out_path: Path | None = None,
    manifest_path: Path | None = None,
    config: BundlerConfig | None = None,
) -> BuildResult:
    """Build a bundle and write it, plus the graph manifest, to disk.

    Nothing is written unless the whole build succeeds.

    Args:
        root: Project root; config paths are resolved inside it
        entry: Entry module relative to ``root`` (default: config entry)
        out_path: Bundle path (default: config output, else nothing written)
        manifest_path: Manifest path (default: config manifest)
        config: Configuration (default: loaded from ``root``)

    Returns:
        BuildResult with the graph, the bundle source and written paths.
    """
    if config is None:
        config = load_config(root)

    if out_path is None and config.output is not None:
        out_path = resolve_output_path(root, config.output)
    if manifest_path is None and config.manifest is not None:
        manifest_path = resolve_output_path(root, config.manifest)

    result = build_bundle(root=root, entry=entry, config=config)

    if out_path is not None:
        _write_text(out_path, result.source)
        logger.info("wrote bundle of %d modules to %s", len(result.graph), out_path)
    if manifest_path is not None:
        _write_jsonl(manifest_path, manifest_records(result.graph, root))
        logger.info("wrote graph manifest to %s", manifest_path)

    return BuildResult(
        graph=result.graph,
        source=result.source,
        bundle_path=out_path,
        manifest_path=manifest_path,
    )


__all__ = [
    "BuildResult",
    "build_bundle",
    "manifest_records",
    "render_manifest",
    "resolve_entry",
    "write_artifacts",
]
