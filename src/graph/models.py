"""Module and dependency graph models.

A ``ModuleRecord`` is created once per import edge by the parser and is
frozen afterwards, except for its ``mapping`` dict which the graph builder
fills in place. A ``DependencyGraph`` is the ordered collection handed to the
bundle emitter.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _artifact_schema_version() -> int:
    from contract.artifacts import ARTIFACT_SCHEMA_VERSION

    return ARTIFACT_SCHEMA_VERSION


class ModuleRecord(BaseModel):
    """One parsed module: identity, normalized code and raw dependencies."""

    model_config = ConfigDict(frozen=True)

    identifier: int = Field(ge=0)
    path: str
    code: str
    dependency_specifiers: list[str] = Field(default_factory=list)
    mapping: dict[str, int] = Field(default_factory=dict)


class ManifestRecord(BaseModel):
    """Serializable view of a ``ModuleRecord`` without its code."""

    schema_version: int = Field(default_factory=_artifact_schema_version)
    identifier: int
    path: str
    dependency_specifiers: list[str]
    mapping: dict[str, int]

    @classmethod
    def from_module(cls, module: ModuleRecord, path: str | None = None) -> ManifestRecord:
        return cls(
            identifier=module.identifier,
            path=path if path is not None else module.path,
            dependency_specifiers=list(module.dependency_specifiers),
            mapping=dict(module.mapping),
        )


class DependencyGraph(BaseModel):
    """Ordered module records, entry module first.

    The same file reached through two import edges appears twice, with two
    identifiers.
    """

    modules: list[ModuleRecord] = Field(min_length=1)

    @model_validator(mode="after")
    def _check_invariants(self) -> DependencyGraph:
        entry = self.modules[0]
        if entry.identifier != 0:
            msg = f"entry module {entry.path!r} must have identifier 0"
            raise ValueError(msg)

        identifiers = [module.identifier for module in self.modules]
        if len(set(identifiers)) != len(identifiers):
            msg = "module identifiers must be unique within a graph"
            raise ValueError(msg)

        known = set(identifiers)
        for module in self.modules:
            if set(module.mapping) != set(module.dependency_specifiers):
                msg = (
                    f"mapping of {module.path!r} does not cover exactly "
                    "its dependency specifiers"
                )
                raise ValueError(msg)
            dangling = sorted(
                spec for spec, target in module.mapping.items() if target not in known
            )
            if dangling:
                msg = (
                    f"mapping of {module.path!r} points outside the graph: "
                    f"{', '.join(dangling)}"
                )
                raise ValueError(msg)
        return self

    @property
    def entry(self) -> ModuleRecord:
        return self.modules[0]

    def get(self, identifier: int) -> ModuleRecord:
        for module in self.modules:
            if module.identifier == identifier:
                return module
        msg = f"no module with identifier {identifier}"
        raise KeyError(msg)

    def __iter__(self) -> Iterator[ModuleRecord]:  # type: ignore[override]
        return iter(self.modules)

    def __len__(self) -> int:
        return len(self.modules)


__all__ = ["DependencyGraph", "ManifestRecord", "ModuleRecord"]
