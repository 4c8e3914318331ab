"""Health check framework for atp-explorer.

Provides a composable health-check system that reports the aggregate status
of the explorer's registry snapshot and its refresh loop.

Shipped in this module
----------------------
- HealthStatus    - ordered enum: HEALTHY / DEGRADED / UNHEALTHY
- CheckResult     - result of a single named check
- HealthReport    - aggregate report from :class:`HealthCheck`
- HealthCheck     - registry and runner for named check functions
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from atpexplorer.registry.store import RegistryStore

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Ordered health status values.

    HEALTHY   - all checks pass.
    DEGRADED  - the explorer still serves, possibly from stale or empty data.
    UNHEALTHY - a check could not run at all.
    """

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Result of a single named health check."""

    name: str
    status: HealthStatus
    message: str = ""


@dataclass
class HealthReport:
    """Aggregate health report.

    Attributes
    ----------
    status:
        Overall status: the worst status across all individual checks.
    checks:
        Mapping from check name to its :class:`CheckResult`.
    timestamp:
        UTC time when the report was generated.
    """

    status: HealthStatus
    checks: dict[str, CheckResult] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def is_healthy(self) -> bool:
        """Return ``True`` iff all checks are ``HEALTHY``."""
        return self.status is HealthStatus.HEALTHY

    def to_dict(self) -> dict[str, object]:
        """Serialise to a plain dict suitable for JSON encoding."""
        return {
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "checks": {
                name: {"status": result.status.value, "message": result.message}
                for name, result in self.checks.items()
            },
        }


_CheckFn = Callable[[], CheckResult]


class HealthCheck:
    """Registry and runner for named health check functions.

    Examples
    --------
    >>> hc = HealthCheck()
    >>> hc.register_check("always-ok", lambda: CheckResult("always-ok", HealthStatus.HEALTHY))
    >>> hc.run_checks().is_healthy()
    True
    """

    def __init__(self) -> None:
        self._checks: dict[str, _CheckFn] = {}

    def register_check(self, name: str, check_fn: _CheckFn) -> None:
        """Register a zero-argument callable returning a :class:`CheckResult`."""
        self._checks[name] = check_fn
        logger.debug("Registered health check %r.", name)

    def unregister_check(self, name: str) -> None:
        self._checks.pop(name, None)

    # ------------------------------------------------------------------
    # Built-in check factories
    # ------------------------------------------------------------------

    def register_snapshot_check(self, store: RegistryStore) -> None:
        """Report on the currently published snapshot of *store*.

        DEGRADED when the document directory is missing or some documents
        were skipped; the explorer keeps serving in both cases.
        """

        def _check() -> CheckResult:
            snapshot = store.snapshot
            count = len(snapshot)
            if not snapshot.directory_found:
                return CheckResult(
                    name="registry_snapshot",
                    status=HealthStatus.DEGRADED,
                    message=f"Registry directory {snapshot.source_dir} not found; serving 0 identities.",
                )
            if snapshot.skipped_documents:
                return CheckResult(
                    name="registry_snapshot",
                    status=HealthStatus.DEGRADED,
                    message=(
                        f"{count} identities loaded; "
                        f"{len(snapshot.skipped_documents)} document(s) skipped: "
                        f"{', '.join(snapshot.skipped_documents)}"
                    ),
                )
            return CheckResult(
                name="registry_snapshot",
                status=HealthStatus.HEALTHY,
                message=f"{count} identities loaded from {snapshot.source_dir}.",
            )

        self.register_check("registry_snapshot", _check)

    def register_refresh_check(self, store: RegistryStore) -> None:
        """Report whether the refresh loop of *store* is alive and succeeding."""

        def _check() -> CheckResult:
            if store.last_error is not None:
                return CheckResult(
                    name="refresh_loop",
                    status=HealthStatus.DEGRADED,
                    message=f"Last refresh failed: {store.last_error}",
                )
            if not store.is_running:
                return CheckResult(
                    name="refresh_loop",
                    status=HealthStatus.DEGRADED,
                    message="Refresh loop is not running; snapshot will not update.",
                )
            return CheckResult(
                name="refresh_loop",
                status=HealthStatus.HEALTHY,
                message=(
                    f"Refreshing every {store.config.refresh_interval_seconds:g}s; "
                    f"{store.reload_count} reload(s) so far."
                ),
            )

        self.register_check("refresh_loop", _check)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run_checks(self) -> HealthReport:
        """Execute all registered health checks and return an aggregate report.

        Individual check exceptions are caught and recorded as UNHEALTHY
        results so that a single failing check never prevents others from
        running.
        """
        results: dict[str, CheckResult] = {}
        worst_status = HealthStatus.HEALTHY

        for name, check_fn in list(self._checks.items()):
            try:
                result = check_fn()
            except Exception as exc:
                logger.exception("Health check %r raised an exception.", name)
                result = CheckResult(
                    name=name,
                    status=HealthStatus.UNHEALTHY,
                    message=f"Check raised: {exc}",
                )

            results[name] = result

            if result.status is HealthStatus.UNHEALTHY:
                worst_status = HealthStatus.UNHEALTHY
            elif (
                result.status is HealthStatus.DEGRADED
                and worst_status is HealthStatus.HEALTHY
            ):
                worst_status = HealthStatus.DEGRADED

        return HealthReport(status=worst_status, checks=results)

    def __repr__(self) -> str:
        return f"HealthCheck(checks={sorted(self._checks)})"
