"""HTTP API package for atp-explorer."""
from __future__ import annotations

from atpexplorer.api.app import create_app

__all__ = ["create_app"]
