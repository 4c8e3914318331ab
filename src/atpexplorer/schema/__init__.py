"""Schema package for atp-explorer: identity shape, configuration, errors."""
from __future__ import annotations

from atpexplorer.schema.config import ExplorerConfig
from atpexplorer.schema.errors import (
    AtpExplorerError,
    ConfigurationError,
    ErrorSeverity,
    InvalidQueryError,
    RegistryError,
)
from atpexplorer.schema.identity import DEFAULT_ATP_VERSION, DEFAULT_RECORD_TYPE, Identity

__all__ = [
    "ExplorerConfig",
    "AtpExplorerError",
    "ConfigurationError",
    "ErrorSeverity",
    "InvalidQueryError",
    "RegistryError",
    "Identity",
    "DEFAULT_ATP_VERSION",
    "DEFAULT_RECORD_TYPE",
]
