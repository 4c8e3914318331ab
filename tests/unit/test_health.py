"""Unit tests for atpexplorer.health.check."""
from __future__ import annotations

from pathlib import Path

from atpexplorer.health.check import CheckResult, HealthCheck, HealthReport, HealthStatus
from atpexplorer.registry.snapshot import RegistrySnapshot
from atpexplorer.registry.store import RegistryStore
from atpexplorer.schema.config import ExplorerConfig

from conftest import write_document


class TestHealthReport:
    def test_is_healthy(self) -> None:
        assert HealthReport(status=HealthStatus.HEALTHY).is_healthy() is True
        assert HealthReport(status=HealthStatus.DEGRADED).is_healthy() is False

    def test_to_dict(self) -> None:
        report = HealthReport(
            status=HealthStatus.DEGRADED,
            checks={"x": CheckResult("x", HealthStatus.DEGRADED, "meh")},
        )
        data = report.to_dict()
        assert data["status"] == "degraded"
        assert data["checks"] == {"x": {"status": "degraded", "message": "meh"}}


class TestHealthCheckRunner:
    def test_empty_runner_is_healthy(self) -> None:
        assert HealthCheck().run_checks().is_healthy()

    def test_worst_status_wins(self) -> None:
        hc = HealthCheck()
        hc.register_check("ok", lambda: CheckResult("ok", HealthStatus.HEALTHY))
        hc.register_check("meh", lambda: CheckResult("meh", HealthStatus.DEGRADED))
        assert hc.run_checks().status is HealthStatus.DEGRADED

    def test_raising_check_is_unhealthy(self) -> None:
        def boom() -> CheckResult:
            raise RuntimeError("kaput")

        hc = HealthCheck()
        hc.register_check("boom", boom)
        report = hc.run_checks()
        assert report.status is HealthStatus.UNHEALTHY
        assert "kaput" in report.checks["boom"].message

    def test_unregister(self) -> None:
        hc = HealthCheck()
        hc.register_check("x", lambda: CheckResult("x", HealthStatus.UNHEALTHY))
        hc.unregister_check("x")
        assert hc.run_checks().is_healthy()


class TestSnapshotCheck:
    def _run(self, store: RegistryStore) -> CheckResult:
        hc = HealthCheck()
        hc.register_snapshot_check(store)
        return hc.run_checks().checks["registry_snapshot"]

    def test_healthy_registry(self, config: ExplorerConfig) -> None:
        store = RegistryStore(config)
        store.reload()
        result = self._run(store)
        assert result.status is HealthStatus.HEALTHY
        assert "3 identities" in result.message

    def test_missing_directory_is_degraded(self, tmp_path: Path) -> None:
        store = RegistryStore(ExplorerConfig(registry_path=str(tmp_path / "missing")))
        store.reload()
        assert self._run(store).status is HealthStatus.DEGRADED

    def test_skipped_documents_are_degraded(self, tmp_path: Path) -> None:
        directory = tmp_path / "identities"
        write_document(directory, "ok.json", {"name": "ok"})
        (directory / "bad.json").write_text("nope", encoding="utf-8")
        store = RegistryStore(ExplorerConfig(registry_path=str(tmp_path)))
        store.reload()
        result = self._run(store)
        assert result.status is HealthStatus.DEGRADED
        assert "bad.json" in result.message


class TestRefreshCheck:
    def _run(self, store: RegistryStore) -> CheckResult:
        hc = HealthCheck()
        hc.register_refresh_check(store)
        return hc.run_checks().checks["refresh_loop"]

    def test_stopped_loop_is_degraded(self, config: ExplorerConfig) -> None:
        assert self._run(RegistryStore(config)).status is HealthStatus.DEGRADED

    def test_running_loop_is_healthy(self, config: ExplorerConfig) -> None:
        with RegistryStore(config) as store:
            assert self._run(store).status is HealthStatus.HEALTHY

    def test_failed_refresh_is_degraded(self) -> None:
        def builder(_config: ExplorerConfig) -> RegistrySnapshot:
            raise OSError("gone")

        store = RegistryStore(ExplorerConfig(), builder=builder)
        store.refresh()
        result = self._run(store)
        assert result.status is HealthStatus.DEGRADED
        assert "gone" in result.message
