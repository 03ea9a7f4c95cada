"""Target environment profile for the module transformer."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TargetProfile(BaseModel):
    """What the bundle's execution environment needs from rewritten modules."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    strict_mode: bool = Field(
        default=True,
        description='Prefix each module with a "use strict" directive',
    )
    es_module_marker: bool = Field(
        default=True,
        description="Define exports.__esModule on modules that export",
    )
    interop_default: bool = Field(
        default=True,
        description=(
            "Read default imports through the CommonJS interop helper so "
            "modules without an __esModule marker still work"
        ),
    )


__all__ = ["TargetProfile"]
