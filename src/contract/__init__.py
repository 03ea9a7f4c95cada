"""Stable public surface for minibundle.

Errors are exported eagerly. Graph models are resolved lazily so that
importing the contract does not pull in the parser.
"""

from contract.artifacts import ARTIFACT_SCHEMA_VERSION
from contract.errors import BundleError, ModuleSyntaxError, ReadError, TransformError


def __getattr__(name: str) -> object:
    if name in {"DependencyGraph", "ManifestRecord", "ModuleRecord"}:
        from graph.models import DependencyGraph, ManifestRecord, ModuleRecord

        return {
            "DependencyGraph": DependencyGraph,
            "ManifestRecord": ManifestRecord,
            "ModuleRecord": ModuleRecord,
        }[name]

    msg = f"module 'contract' has no attribute {name!r}"
    raise AttributeError(msg)


__all__ = [
    "ARTIFACT_SCHEMA_VERSION",
    "BundleError",
    "DependencyGraph",
    "ManifestRecord",
    "ModuleRecord",
    "ModuleSyntaxError",
    "ReadError",
    "TransformError",
]
