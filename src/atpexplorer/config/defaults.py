"""Default configuration constants for atp-explorer.

``DEFAULT_CONFIG`` is the starting point used by ``ConfigLoader.load_auto()``
before applying file or environment overrides.
"""
from __future__ import annotations

from atpexplorer.schema.config import ExplorerConfig

DEFAULT_CONFIG: ExplorerConfig = ExplorerConfig(
    registry_path="atp-registry",
    identities_dir="identities",
    document_extensions=[".json"],
    sort_documents=True,
    refresh_interval_seconds=300.0,
    host="127.0.0.1",
    port=3847,
    cors_origins=["*"],
    log_level="INFO",
)
"""Baseline ``ExplorerConfig`` used when no file or env config is present."""
