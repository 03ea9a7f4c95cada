"""Parsing utilities for minibundle modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

from parse.treesitter_js import extract_dependency_specifiers, parse_source

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from graph.models import ModuleRecord
    from transform.profile import TargetProfile


def parse_module(
    file_path: str | Path,
    next_identifier: Callable[[], int],
    profile: TargetProfile | None = None,
) -> ModuleRecord:
    """Parse a module via lazy import to avoid package import cycles."""
    from parse.modules import parse_module as _parse_module

    return _parse_module(file_path, next_identifier, profile)


__all__ = ["extract_dependency_specifiers", "parse_module", "parse_source"]
