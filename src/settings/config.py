from __future__ import annotations

from pathlib import Path
from typing import Any

import tomllib
from pydantic import BaseModel, ConfigDict, Field, field_validator

from transform.profile import TargetProfile

CONFIG_FILENAME = "minibundle.toml"


class BundlerConfig(BaseModel):
    """Configuration for a minibundle build."""

    model_config = ConfigDict(extra="forbid")

    entry: str | None = Field(
        default=None,
        description="Entry module, relative to the project root",
    )
    output: str | None = Field(
        default=None,
        description="Bundle output path (default: write to stdout)",
    )
    manifest: str | None = Field(
        default=None,
        description="Optional JSONL graph manifest output path",
    )
    target: TargetProfile = Field(
        default_factory=TargetProfile,
        description="Target environment profile for module rewriting",
    )

    @field_validator("entry", "output", "manifest", mode="before")
    @classmethod
    def validate_paths(cls, v: Any) -> Any:
        """Reject empty path strings so they are not mistaken for the root."""
        if v is None:
            return None
        if not isinstance(v, str):
            msg = "paths must be strings"
            raise TypeError(msg)
        if not v.strip():
            msg = "paths must be non-empty"
            raise ValueError(msg)
        return v


class ConfigError(Exception):
    """Raised when config file exists but cannot be parsed."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def location(self) -> str:
        return str(self.path) if self.path is not None else "config"


def resolve_output_path(root: Path, output: str) -> Path:
    """Resolve a config-provided output path safely within the project root.

    The path must be relative and must stay within the root after
    resolution. Absolute paths and paths that escape the root are rejected.
    """
    if output.startswith("~"):
        msg = "output paths must be relative to the project root"
        raise ConfigError(msg)

    output_path = Path(output)
    if output_path.is_absolute():
        msg = "output paths must be relative to the project root"
        raise ConfigError(msg)

    try:
        resolved_root = root.resolve()
        resolved_output = (resolved_root / output_path).resolve()
    except OSError as exc:
        msg = f"Failed to resolve output path '{output}': {exc}"
        raise ConfigError(msg) from exc

    try:
        resolved_output.relative_to(resolved_root)
    except ValueError as exc:
        msg = f"output path '{output}' escapes the project root"
        raise ConfigError(msg) from exc

    return resolved_output


def load_config(root: Path) -> BundlerConfig:
    """Load configuration from minibundle.toml if it exists."""
    config_path = Path(root) / CONFIG_FILENAME

    if not config_path.is_file():
        return BundlerConfig()

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {config_path}: {e}"
        raise ConfigError(msg, config_path) from e

    try:
        return BundlerConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid config in {config_path}: {e}"
        raise ConfigError(msg, config_path) from e
