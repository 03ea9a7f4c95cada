"""Configuration loading for minibundle projects."""

from settings.config import (
    CONFIG_FILENAME,
    BundlerConfig,
    ConfigError,
    load_config,
    resolve_output_path,
)

__all__ = [
    "CONFIG_FILENAME",
    "BundlerConfig",
    "ConfigError",
    "load_config",
    "resolve_output_path",
]
