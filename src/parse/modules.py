"""Turn one module file into a ``ModuleRecord``."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from contract.errors import ReadError
from graph.models import ModuleRecord
from parse.treesitter_js import extract_dependency_specifiers, parse_source
from transform.commonjs import transform_module
from utils import normalize_path

if TYPE_CHECKING:
    from collections.abc import Callable

    from transform.profile import TargetProfile

logger = logging.getLogger(__name__)


def read_source(path: str) -> bytes:
    """Read a module file and check that it decodes as UTF-8.

    Raises:
        ReadError: If the file cannot be opened, read or decoded.
    """
    try:
        source_bytes = Path(path).read_bytes()
        source_bytes.decode("utf-8")
    except OSError as exc:
        msg = f"cannot read module: {exc.strerror or exc}"
        raise ReadError(path, msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"module is not valid UTF-8: {exc.reason} at byte {exc.start}"
        raise ReadError(path, msg) from exc
    return source_bytes


def parse_module(
    file_path: str | Path,
    next_identifier: Callable[[], int],
    profile: TargetProfile | None = None,
) -> ModuleRecord:
    """Read, parse and normalize one module.

    Args:
        file_path: Path of the module file
        next_identifier: Allocator owned by the graph builder; called once,
            after the module parsed successfully
        profile: Target profile handed to the transformer

    Returns:
        A ModuleRecord with an empty mapping.

    Raises:
        ReadError: If the file cannot be read as UTF-8.
        ModuleSyntaxError: If the source does not parse.
        TransformError: If a module statement cannot be rewritten.
    """
    path = normalize_path(file_path)
    source_bytes = read_source(path)
    tree = parse_source(source_bytes, path)
    specifiers = extract_dependency_specifiers(tree)

    identifier = next_identifier()
    code = transform_module(tree, source_bytes, path, profile)

    logger.debug(
        "parsed module %d %s (%d dependencies)", identifier, path, len(specifiers)
    )
    return ModuleRecord(
        identifier=identifier,
        path=path,
        code=code,
        dependency_specifiers=specifiers,
    )


__all__ = ["parse_module", "read_source"]
