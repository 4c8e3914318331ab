"""Registry package for atp-explorer.

Provides document normalisation, snapshot indexing and querying, and the
refreshing snapshot store.
"""
from __future__ import annotations

from atpexplorer.registry.documents import DocumentScan, scan_directory
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

__all__ = [
    "DocumentScan",
    "scan_directory",
    "normalize",
    "NotFound",
    "Page",
    "PlatformUnknown",
    "RegistrySnapshot",
    "RegistryStats",
    "SearchResult",
    "build_snapshot",
    "RegistryStore",
]
