"""Shared path utilities for minibundle."""

from __future__ import annotations

import os
from pathlib import Path


def normalize_path(file_path: str | Path) -> str:
    """Return an absolute, normalized POSIX-style path string.

    Symlinks are not followed; two spellings of the same file only collapse
    when they normalize to the same string.

    Examples:
        >>> normalize_path("/repo/src/../lib/a.js")
        '/repo/lib/a.js'
    """
    path_str = os.fspath(file_path)
    return Path(os.path.normpath(os.path.abspath(path_str))).as_posix()


def resolve_specifier(importer_path: str | Path, specifier: str) -> str:
    """Resolve an import specifier against the importing module's directory.

    Plain relative join followed by normalization. There is no extension
    inference, no index file lookup and no package lookup: the specifier
    must name the file exactly.

    Examples:
        >>> resolve_specifier("/repo/src/entry.js", "./message.js")
        '/repo/src/message.js'
        >>> resolve_specifier("/repo/src/entry.js", "../lib/name.js")
        '/repo/lib/name.js'
    """
    directory = os.path.dirname(os.fspath(importer_path))
    return normalize_path(os.path.join(directory, specifier))


def relative_to_root(file_path: str, root: Path) -> str:
    """Express a module path relative to ``root`` when it lives under it.

    Both sides are compared as normalized paths first, then with symlinks
    resolved, so a symlinked project root still yields relative paths.
    """
    path = Path(normalize_path(file_path))
    candidates = (
        (path, Path(normalize_path(root))),
        (Path(os.path.realpath(path)), Path(os.path.realpath(root))),
    )
    for candidate, base in candidates:
        try:
            return candidate.relative_to(base).as_posix()
        except ValueError:
            continue
    # Outside the root: keep the absolute path.
    return path.as_posix()
