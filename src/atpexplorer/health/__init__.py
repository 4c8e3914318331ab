"""Health check package for atp-explorer."""
from __future__ import annotations

from atpexplorer.health.check import CheckResult, HealthCheck, HealthReport, HealthStatus

__all__ = ["CheckResult", "HealthCheck", "HealthReport", "HealthStatus"]
