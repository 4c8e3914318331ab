"""Published-snapshot cell and periodic refresh for atp-explorer.

``RegistryStore`` owns the process-wide reference to the current
:class:`~atpexplorer.registry.snapshot.RegistrySnapshot`.  A single
background thread rebuilds the snapshot on a fixed interval and publishes
it with one reference assignment.  Readers take ``store.snapshot`` once and
query that object; they never lock and never see a half-built index.

Shipped in this module
----------------------
- RegistryStore   - snapshot holder with reload/refresh and a timer thread
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path

from atpexplorer.registry.snapshot import RegistrySnapshot, build_snapshot
from atpexplorer.schema.config import ExplorerConfig
from atpexplorer.schema.errors import RegistryError

logger = logging.getLogger(__name__)

SnapshotBuilder = Callable[[ExplorerConfig], RegistrySnapshot]


def default_builder(config: ExplorerConfig) -> RegistrySnapshot:
    """Build a snapshot from the directory named by *config*."""
    return build_snapshot(
        config.documents_dir,
        extensions=config.document_extensions,
        ordered=config.sort_documents,
    )


class RegistryStore:
    """Holder of the currently published registry snapshot.

    Parameters
    ----------
    config:
        Explorer configuration; supplies the document directory and the
        refresh interval.
    builder:
        Callable producing a fresh snapshot from *config*.  Defaults to
        :func:`default_builder`.

    Examples
    --------
    >>> store = RegistryStore(ExplorerConfig(registry_path="/nonexistent"))
    >>> len(store.reload())
    0
    """

    def __init__(
        self,
        config: ExplorerConfig | None = None,
        builder: SnapshotBuilder | None = None,
    ) -> None:
        self.config: ExplorerConfig = config or ExplorerConfig()
        self._builder: SnapshotBuilder = builder or default_builder
        self._snapshot: RegistrySnapshot = RegistrySnapshot.empty(self.config.documents_dir)
        self._publish_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._reload_count = 0
        self._last_error: BaseException | None = None

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> RegistrySnapshot:
        """The currently published snapshot."""
        return self._snapshot

    @property
    def documents_dir(self) -> Path:
        return self.config.documents_dir

    @property
    def reload_count(self) -> int:
        """Number of snapshots published since construction."""
        return self._reload_count

    @property
    def last_error(self) -> BaseException | None:
        """Exception from the most recent failed refresh, if it failed."""
        return self._last_error

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def reload(self) -> RegistrySnapshot:
        """Build a fresh snapshot and publish it.

        Concurrent callers are serialised; readers keep using the previous
        snapshot until the assignment at the end.

        Raises
        ------
        RegistryError
            If the builder fails.  The previous snapshot stays published.
        """
        with self._publish_lock:
            try:
                fresh = self._builder(self.config)
            except Exception as exc:
                raise RegistryError(
                    f"Failed to build registry snapshot from {self.documents_dir}: {exc}",
                    context={"path": str(self.documents_dir)},
                ) from exc
            self._snapshot = fresh
            self._reload_count += 1
            self._last_error = None
        logger.info("Registry reloaded: %d identities", len(fresh))
        return fresh

    def refresh(self) -> bool:
        """Reload without raising.

        Returns
        -------
        bool
            ``True`` if a new snapshot was published.  On failure the error
            is logged and kept in :attr:`last_error`.
        """
        try:
            self.reload()
        except RegistryError as exc:
            self._last_error = exc
            logger.exception("Registry refresh failed; keeping previous snapshot.")
            return False
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Load synchronously, then refresh every configured interval.

        Calling ``start()`` on a running store is a no-op.
        """
        if self.is_running:
            return
        self.refresh()
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="atp-registry-refresh",
            daemon=True,
        )
        self._thread.start()
        logger.debug(
            "Started registry refresh every %.1fs for %s",
            self.config.refresh_interval_seconds,
            self.documents_dir,
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        """Stop the refresh thread; the current snapshot stays readable."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        self._thread = None
        logger.debug("Stopped registry refresh.")

    def _run(self) -> None:
        interval = self.config.refresh_interval_seconds
        while not self._stop_event.wait(interval):
            self.refresh()

    def __enter__(self) -> "RegistryStore":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def __repr__(self) -> str:
        return (
            f"RegistryStore(path={str(self.documents_dir)!r}, "
            f"identities={len(self._snapshot)}, running={self.is_running})"
        )
