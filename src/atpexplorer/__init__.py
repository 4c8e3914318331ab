"""atp-explorer: index and query Agent Trust Protocol identity registries.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.  The HTTP app lives in
:mod:`atpexplorer.api` and is not imported here.

Quick-start
-----------
>>> from atpexplorer import ExplorerConfig, RegistryStore
>>> store = RegistryStore(ExplorerConfig(registry_path="/nonexistent"))
>>> snapshot = store.reload()
>>> snapshot.list_identities().total
0
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
from atpexplorer.schema.config import ExplorerConfig
from atpexplorer.schema.errors import (
    AtpExplorerError,
    ConfigurationError,
    ErrorSeverity,
    InvalidQueryError,
    RegistryError,
)
from atpexplorer.schema.identity import Identity

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
from atpexplorer.registry.normalizer import normalize
from atpexplorer.registry.snapshot import (
    NotFound,
    Page,
    PlatformUnknown,
    RegistrySnapshot,
    RegistryStats,
    SearchResult,
    build_snapshot,
)
from atpexplorer.registry.store import RegistryStore

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------
from atpexplorer.config.defaults import DEFAULT_CONFIG
from atpexplorer.config.loader import ConfigLoader
from atpexplorer.config.schema import validate_config

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
from atpexplorer.health.check import CheckResult, HealthCheck, HealthReport, HealthStatus

__all__ = [
    "__version__",
    # schema
    "ExplorerConfig",
    "Identity",
    "ErrorSeverity",
    "AtpExplorerError",
    "ConfigurationError",
    "RegistryError",
    "InvalidQueryError",
    # registry
    "normalize",
    "build_snapshot",
    "RegistrySnapshot",
    "RegistryStore",
    "NotFound",
    "PlatformUnknown",
    "Page",
    "SearchResult",
    "RegistryStats",
    # config
    "DEFAULT_CONFIG",
    "ConfigLoader",
    "validate_config",
    # health
    "HealthStatus",
    "CheckResult",
    "HealthReport",
    "HealthCheck",
]
