"""Config package for atp-explorer.

Provides configuration loading, validation, and defaults.
"""
from __future__ import annotations

from atpexplorer.config.defaults import DEFAULT_CONFIG
from atpexplorer.config.loader import ConfigLoader
from atpexplorer.config.schema import ExplorerConfig, validate_config

__all__ = [
    "ExplorerConfig",
    "validate_config",
    "ConfigLoader",
    "DEFAULT_CONFIG",
]
