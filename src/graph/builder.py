"""Dependency graph construction.

The builder walks the import graph breadth-first from the entry module. Each
import edge is parsed into its own ``ModuleRecord``: there is no cache by
path, so a file imported from two places appears twice with two
identifiers. There is no cycle detection either; an import cycle keeps the
worklist growing forever.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from graph.models import DependencyGraph, ModuleRecord
from parse.modules import parse_module
from utils import normalize_path, resolve_specifier

if TYPE_CHECKING:
    from pathlib import Path

    from transform.profile import TargetProfile

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Builds dependency graphs, owning the per-build identifier counter."""

    def __init__(self, profile: TargetProfile | None = None) -> None:
        self.profile = profile
        self._next_id = 0

    def _allocate_identifier(self) -> int:
        identifier = self._next_id
        self._next_id += 1
        return identifier

    def _create_module(self, path: str) -> ModuleRecord:
        return parse_module(path, self._allocate_identifier, self.profile)

    def build(self, entry: str | Path) -> DependencyGraph:
        """Build the graph reachable from ``entry``.

        Identifiers restart at 0 on every call, so the entry module is
        always identifier 0 and identifiers follow discovery order.

        Raises:
            ReadError: If any reachable module cannot be read.
            ModuleSyntaxError: If any reachable module does not parse.
        """
        self._next_id = 0

        entry_module = self._create_module(normalize_path(entry))
        modules: list[ModuleRecord] = [entry_module]
        worklist: deque[ModuleRecord] = deque([entry_module])

        while worklist:
            asset = worklist.popleft()
            for specifier in asset.dependency_specifiers:
                child_path = resolve_specifier(asset.path, specifier)
                child = self._create_module(child_path)
                asset.mapping[specifier] = child.identifier
                logger.debug(
                    "%s: %r -> module %d", asset.path, specifier, child.identifier
                )
                modules.append(child)
                worklist.append(child)

        logger.info("built graph of %d modules from %s", len(modules), entry_module.path)
        return DependencyGraph(modules=modules)


def build_graph(
    entry: str | Path,
    profile: TargetProfile | None = None,
) -> DependencyGraph:
    """Build a dependency graph with a fresh builder."""
    return GraphBuilder(profile).build(entry)


__all__ = ["GraphBuilder", "build_graph"]
